"""History serialization.

JSON is the canonical persisted form: a bare array of message objects.
YAML is offered for human inspection and round-trips the same data.

Classes
-------
- HistorySerializer  — serialize/deserialize LabeledHistory to JSON or YAML
"""
from __future__ import annotations

from typing import Literal

import yaml

from agent_session_context.history.labeled_history import LabeledHistory

HistoryFormat = Literal["json", "yaml"]


class HistorySerializer:
    """Serialize and deserialize ``LabeledHistory`` objects.

    Parameters
    ----------
    indent:
        JSON indentation level (default 2).
    """

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def to_json(self, history: LabeledHistory) -> str:
        """Serialise ``history`` to a JSON array."""
        return history.to_json(indent=self.indent)

    def from_json(self, raw: str) -> LabeledHistory:
        """Deserialize a JSON array produced by ``to_json``.

        Raises
        ------
        ValueError
            If the document is not a JSON array.
        pydantic.ValidationError
            If an entry is not a valid message.
        """
        return LabeledHistory.from_json(raw)

    # ------------------------------------------------------------------
    # YAML
    # ------------------------------------------------------------------

    def to_yaml(self, history: LabeledHistory) -> str:
        """Serialise ``history`` to a YAML sequence."""
        return yaml.safe_dump(
            history.to_list(), default_flow_style=False, allow_unicode=True, sort_keys=False
        )

    def from_yaml(self, raw: str) -> LabeledHistory:
        """Deserialize a YAML sequence produced by ``to_yaml``.

        Raises
        ------
        ValueError
            If the document is not a sequence.
        """
        data = yaml.safe_load(raw)
        if data is None:
            return LabeledHistory()
        if not isinstance(data, list):
            raise ValueError(f"History YAML must be a sequence, got {type(data).__name__}.")
        return LabeledHistory.from_list(data)

    # ------------------------------------------------------------------
    # Format dispatch
    # ------------------------------------------------------------------

    def serialize(self, history: LabeledHistory, format: HistoryFormat = "json") -> str:
        if format == "yaml":
            return self.to_yaml(history)
        return self.to_json(history)

    def deserialize(self, raw: str, format: HistoryFormat = "json") -> LabeledHistory:
        if format == "yaml":
            return self.from_yaml(raw)
        return self.from_json(raw)
