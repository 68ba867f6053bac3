"""
Domain models — Pydantic types for smcgen.

All models are re-exported here for convenient access:

    from smcgen.core.models import GenerationRequest, Diagnostic, ProcessOutcome
"""

from smcgen.core.models.generation import Diagnostic, DiagnosticReport, GenerationRequest
from smcgen.core.models.manifest import ItemRecord, ProjectManifest, ReferenceRecord
from smcgen.core.models.outcome import InvocationSpec, ProcessOutcome, quote_args

__all__ = [
    # generation.py
    "Diagnostic",
    "DiagnosticReport",
    "GenerationRequest",
    # outcome.py
    "InvocationSpec",
    # manifest.py
    "ItemRecord",
    "ProcessOutcome",
    "ProjectManifest",
    "ReferenceRecord",
    "quote_args",
]
