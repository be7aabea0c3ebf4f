"""Installer configuration document engine."""
from .config import Config
from .document import Document, MappingNode, Node, ScalarNode, SequenceNode
from .errors import ConfigError, ErrorKind
from .flatten import coerce_bool, deep_merge, expand, flatten
from .overrides import SETTING_KEY, parse_overrides
from .source import DEFAULT_RELATIVE_CONFIG_PATH, BundledSource, DirectorySource, LayeredSource, default_source
from .spec import ROOT_KEY, Product, Spec

__all__ = [
    "Config",
    "ConfigError",
    "ErrorKind",
    "Document",
    "Node",
    "MappingNode",
    "SequenceNode",
    "ScalarNode",
    "Spec",
    "Product",
    "ROOT_KEY",
    "SETTING_KEY",
    "DEFAULT_RELATIVE_CONFIG_PATH",
    "BundledSource",
    "DirectorySource",
    "LayeredSource",
    "default_source",
    "flatten",
    "expand",
    "deep_merge",
    "coerce_bool",
    "parse_overrides",
]
