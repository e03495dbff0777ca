"""Measurement and event models sent to SignalFx"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union
from enum import Enum

Label = Tuple[str, str]
Labels = Union[Mapping[str, str], Iterable[Label], None]


class MetricType(Enum):
    """SignalFx metric types"""
    COUNTER = "counter"
    GAUGE = "gauge"


def normalize_labels(labels: Labels) -> List[Label]:
    """Turn a mapping or pair sequence into an ordered list of string pairs

    Duplicate keys are kept; the backend receives every pair.
    """
    if labels is None:
        return []
    items = labels.items() if isinstance(labels, Mapping) else labels
    return [(str(key), str(value)) for key, value in items]


@dataclass
class Measurement:
    """Single datapoint queued on a session"""
    name: str
    value: Union[int, float]
    metric_type: MetricType = MetricType.GAUGE
    labels: List[Label] = field(default_factory=list)
    timestamp: Optional[float] = None

    def __post_init__(self):
        self.labels = normalize_labels(self.labels)

    @classmethod
    def counter(cls, name: str, value: int = 1, labels: Labels = None) -> "Measurement":
        return cls(name=name, value=value, metric_type=MetricType.COUNTER, labels=labels)

    @classmethod
    def gauge(cls, name: str, value: Union[int, float], labels: Labels = None) -> "Measurement":
        return cls(name=name, value=value, metric_type=MetricType.GAUGE, labels=labels)

    def with_labels(self, labels: Labels) -> "Measurement":
        """Copy of this measurement with extra labels appended"""
        return Measurement(
            name=self.name,
            value=self.value,
            metric_type=self.metric_type,
            labels=self.labels + normalize_labels(labels),
            timestamp=self.timestamp,
        )


@dataclass
class Event:
    """Custom SignalFx event"""
    event_type: str
    category: str = "USER_DEFINED"
    dimensions: Dict[str, str] = field(default_factory=dict)
    properties: Dict[str, Union[str, int, float, bool]] = field(default_factory=dict)
    timestamp: Optional[int] = None  # epoch milliseconds

    def __post_init__(self):
        if self.dimensions is None:
            self.dimensions = {}
        if self.properties is None:
            self.properties = {}

    def to_dict(self) -> Dict:
        return {
            "category": self.category,
            "eventType": self.event_type,
            "dimensions": dict(self.dimensions),
            "properties": dict(self.properties),
            "timestamp": self.timestamp,
        }


class SendError(Exception):
    """A batch could not be delivered to the ingest endpoint"""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None, item_count: int = 0):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.item_count = item_count


class MetricsCloseError(OSError):
    """Session transports could not be released"""
