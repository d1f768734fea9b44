"""Feature tree assembly and ordering."""

from featuretree.tree.builder import Diagnostic, FeatureTreeBuilder
from featuretree.tree.node import FeatureForest, FeatureNode
from featuretree.tree.ordering import natural_key, natural_order

__all__ = [
    "Diagnostic",
    "FeatureTreeBuilder",
    "FeatureForest",
    "FeatureNode",
    "natural_key",
    "natural_order",
]
