"""Enum <-> persisted token codec and its SQLAlchemy column type.

Enum-backed columns store the member's lowercase token ("cles",
"electronique", ...) rather than its Python name. Tokens are also read by the
web frontend, so they form an external contract.

Reads never fail on a bad stored value: an unknown token decodes to the
enum's fallback member and a ``codec.decode.fallback`` warning is logged so
the anomaly stays visible.
"""

from enum import Enum
from typing import Dict, Generic, Optional, Type, TypeVar

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from marketplace.logging import get_logger

E = TypeVar("E", bound=Enum)

_default_logger = get_logger(__name__, component="codec")


class EnumColumnCodec(Generic[E]):
    """Bidirectional mapping between members of one enum type and their tokens.

    The token of a member is its ``value``. Construction checks that every
    token is a non-empty lowercase string and that no two members share one,
    so ``encode`` is total and ``decode(encode(m)) == m`` for every member.

    Args:
        enum_cls: Enumeration type to encode
        fallback: Member returned for unknown tokens. Defaults to
            ``enum_cls.fallback()`` when the enum declares one.
        logger: Logger used to report fallback decodes. Injected so tests and
            callers can observe anomalies without touching global logging.

    Raises:
        ValueError: If the enum's tokens are invalid or no fallback is available
    """

    def __init__(self, enum_cls: Type[E], fallback: Optional[E] = None, logger=None) -> None:
        if fallback is None:
            declared = getattr(enum_cls, "fallback", None)
            if declared is None:
                raise ValueError(f"{enum_cls.__name__} declares no fallback member; pass one explicitly")
            fallback = declared()

        if not isinstance(fallback, enum_cls):
            raise ValueError(f"Fallback {fallback!r} is not a member of {enum_cls.__name__}")

        by_token: Dict[str, E] = {}
        # __members__ includes aliases, which plain iteration hides
        for name, member in enum_cls.__members__.items():
            token = member.value
            if not isinstance(token, str) or not token or token != token.lower() or token != token.strip():
                raise ValueError(
                    f"{enum_cls.__name__}.{name} has invalid token {token!r}: "
                    "tokens must be non-empty, lowercase and unpadded"
                )
            if token in by_token:
                raise ValueError(
                    f"{enum_cls.__name__}.{name} reuses token {token!r} "
                    f"of {by_token[token].name}"
                )
            by_token[token] = member

        self.enum_cls = enum_cls
        self.fallback = fallback
        self._by_token = by_token
        self._logger = logger if logger is not None else _default_logger

    @property
    def tokens(self) -> frozenset:
        """Every token a member of this enum is persisted as."""
        return frozenset(self._by_token)

    def encode(self, value: Optional[E]) -> Optional[str]:
        """Member -> token. ``None`` passes through.

        Raises:
            TypeError: If ``value`` is neither None nor a member of this enum
        """
        if value is None:
            return None

        if not isinstance(value, self.enum_cls):
            raise TypeError(
                f"Cannot encode {value!r} as {self.enum_cls.__name__}; expected a member or None"
            )

        return value.value

    def decode(self, token: Optional[str]) -> Optional[E]:
        """Token -> member.

        ``None``, ``""`` and whitespace-only strings decode to ``None``.
        Surrounding whitespace is ignored; matching is otherwise exact and
        case-sensitive. Unknown tokens decode to the fallback member.
        """
        if token is None:
            return None

        cleaned = token.strip()
        if not cleaned:
            return None

        member = self._by_token.get(cleaned)
        if member is not None:
            return member

        self._logger.warning(
            f"Unknown {self.enum_cls.__name__} token {token!r}, using {self.fallback.name}",
            extra={
                "event": "codec.decode.fallback",
                "enum": self.enum_cls.__name__,
                "token": token,
                "fallback": self.fallback.name,
            },
        )
        return self.fallback

    def __repr__(self) -> str:
        return f"EnumColumnCodec({self.enum_cls.__name__}, fallback={self.fallback.name})"


class EnumColumn(TypeDecorator):
    """String column whose Python-side values are enum members.

    Example:
        >>> category = Column(EnumColumn(LISTING_CATEGORY_CODEC, length=50), nullable=False)
    """

    impl = String
    cache_ok = True

    def __init__(self, codec: EnumColumnCodec, length: int = 50, **kwargs) -> None:
        super().__init__(length=length, **kwargs)
        self.codec = codec

    def process_bind_param(self, value, dialect):
        return self.codec.encode(value)

    def process_result_value(self, value, dialect):
        return self.codec.decode(value)
