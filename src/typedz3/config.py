"""
Context configuration.

Settings are applied to the engine configuration object before the context
is created. Every field can be overridden from the environment with the
``TYPEDZ3_`` prefix (``TYPEDZ3_PROOF=1``, ``TYPEDZ3_TIMEOUT_MS=500``, ...).
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import PreconditionError
from .expr.floating import RoundingMode

ENV_PREFIX = "TYPEDZ3_"


def _param_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ContextConfig(BaseSettings):
    """Engine settings for a new ``Context``.

    Values passed to the constructor win over ``TYPEDZ3_*`` environment
    variables, which win over the defaults. Invalid values raise
    ``PreconditionError``.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        frozen=True,
        protected_namespaces=(),
    )

    model: bool = Field(default=True, description="Enable model construction")
    proof: bool = Field(default=False, description="Enable proof generation")
    unsat_core: bool = Field(default=False, description="Enable unsat core extraction")
    timeout_ms: Optional[int] = Field(
        default=None,
        ge=0,
        description="Engine-wide timeout in milliseconds (None means no limit)",
    )
    rounding_mode: RoundingMode = Field(
        default=RoundingMode.RNE,
        description="Initial rounding mode for floating-point operators",
    )
    extra: Dict[str, Any] = Field(
        default_factory=dict,
        description="Any other engine configuration parameter, by name",
    )

    def __init__(self, **values: Any):
        try:
            super().__init__(**values)
        except ValidationError as ex:
            raise PreconditionError(f"invalid context configuration: {ex}") from ex

    @field_validator("rounding_mode", mode="before")
    @classmethod
    def _parse_rounding_mode(cls, value: Any) -> RoundingMode:
        return RoundingMode.parse(value)

    def with_overrides(self, **params: Any) -> "ContextConfig":
        """Return a copy with known fields replaced and the rest added to ``extra``."""
        values = self.model_dump()
        extra = dict(self.extra)
        for name, value in params.items():
            if name in type(self).model_fields and name != "extra":
                values[name] = value
            else:
                extra[name] = value
        values["extra"] = extra
        return type(self)(**values)

    def to_engine_params(self) -> List[Tuple[str, str]]:
        """Render the configuration as engine parameter name/value strings."""
        params = [
            ("model", _param_text(self.model)),
            ("proof", _param_text(self.proof)),
            ("unsat_core", _param_text(self.unsat_core)),
        ]
        if self.timeout_ms is not None:
            params.append(("timeout", str(self.timeout_ms)))
        for name, value in self.extra.items():
            params.append((str(name), _param_text(value)))
        return params

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ContextConfig":
        """Build a configuration from ``TYPEDZ3_*`` variables.

        With no argument the process environment is read. A mapping is read
        the same way, with its ``TYPEDZ3_*`` entries taking precedence.

        Raises:
            PreconditionError: If a variable holds an unparsable value
        """
        if environ is None:
            return cls()
        values = {}
        for key, value in environ.items():
            if not key.upper().startswith(ENV_PREFIX):
                continue
            name = key[len(ENV_PREFIX):].lower()
            if name in cls.model_fields:
                values[name] = value
        return cls(**values)
