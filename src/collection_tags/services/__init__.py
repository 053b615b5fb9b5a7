"""Reconciliation services."""

from .reconciler import Reconciler, is_managed, partition_tags, plan_item, plan_updates
from .scheduler import IntervalTrigger, TagScheduler
from .selector import parse_collection_names, select_collections
from .tagging import TagSet, build_managed_tag, compute_desired_tags
from .membership import resolve_membership
from .task import CollectionTagTask

__all__ = [
    "CollectionTagTask",
    "IntervalTrigger",
    "Reconciler",
    "TagScheduler",
    "TagSet",
    "build_managed_tag",
    "compute_desired_tags",
    "is_managed",
    "parse_collection_names",
    "partition_tags",
    "plan_item",
    "plan_updates",
    "resolve_membership",
    "select_collections",
]
