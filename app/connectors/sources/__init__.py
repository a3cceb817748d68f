"""Built-in source connectors hosted in-process."""

from .arbetsformedlingen import ArbetsformedlingenConnector
from .eures import EURES_COUNTRIES, EuresConnector
from .jooble import JOOBLE_QUERIES, JoobleConnector
from .remoteok import RemoteOKConnector
from .remotive import RemotiveConnector

__all__ = [
	"ArbetsformedlingenConnector",
	"EURES_COUNTRIES",
	"EuresConnector",
	"JOOBLE_QUERIES",
	"JoobleConnector",
	"RemoteOKConnector",
	"RemotiveConnector",
]
