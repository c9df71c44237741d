"""Configuration schema for chain methods."""

from mlchain.config.schema import ChainConfig, ClassifierConfig, load_chain_config

__all__ = ["ChainConfig", "ClassifierConfig", "load_chain_config"]
