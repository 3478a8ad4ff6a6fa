"""
A module for managing codec configuration.

The configuration decides which chain transactions are built for and which
typed transaction variants the dispatcher accepts, much like the set of
transaction types a fork has activated. It is loaded from a YAML file and
validated with Pydantic.

Classes:
- CodecConfig: The validated configuration.

Functions:
- load_config: Reads a `CodecConfig` from a YAML file.
"""

from pathlib import Path
from typing import List, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .registry import MAX_TRANSACTION_TYPE


class CodecConfig(BaseModel):
    """
    Represents the codec configuration.

    Attributes:
    - chain_id (int): The chain new transactions are bound to.
    - enabled_transaction_types (List[int]): Type bytes the dispatcher
      accepts. Legacy transactions are always accepted.
    """

    chain_id: int = Field(default=1, gt=0, lt=2**64)
    enabled_transaction_types: List[int] = [0x01, 0x02]

    @field_validator("enabled_transaction_types")
    @classmethod
    def check_transaction_types(cls, value: List[int]) -> List[int]:
        """Reject type bytes that collide with RLP headers."""
        for tx_type in value:
            if not 0 <= tx_type <= MAX_TRANSACTION_TYPE:
                raise ValueError(f"invalid transaction type byte `{tx_type}`")
        return value

    def is_enabled(self, tx_type: int) -> bool:
        """Whether the dispatcher accepts the typed variant `tx_type`."""
        return tx_type in self.enabled_transaction_types


DEFAULT_CONFIG = CodecConfig()


def load_config(path: Union[str, Path]) -> CodecConfig:
    """
    Loads and validates a `CodecConfig` from the YAML file at `path`.

    An empty file yields the defaults.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"The configuration file '{path}' does not exist.")

    with path.open("r") as file:
        config_data = yaml.safe_load(file) or {}
        try:
            return CodecConfig(**config_data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e
