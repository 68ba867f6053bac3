"""smcgen — code generation orchestrator for State Machine Compiler files."""

__version__ = "0.1.0"
