"""
Bundle Trainer — Classifier Bundle Training Package
====================================================
Hexagonal (Ports & Adapters) architecture.

Layer map
─────────────────────────────────────────────────────
  config/       All tuneable settings (env / .env driven)
  domain/       Pure business objects (models, exceptions) — no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Concrete implementations of each Port (HTTP API, files…)
  services/     Orchestration logic; depends only on Ports, never Adapters
  interfaces/   Delivery layer: CLI
  tests/        Full test suite: unit / integration / e2e

Pipeline
─────────────────────────────────────────────────────
  sample archives → combinations → submit → poll → cooldown → JSON cache

Swapping any external dependency (training service, archive store, cache):
  1. Write a new adapter in adapters/ implementing the relevant Port
  2. Change the single wiring line in services/container.py
"""
__version__ = "1.0.0"
