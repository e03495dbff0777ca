"""Measurement models, SignalFx endpoint and the aggregating sender"""
