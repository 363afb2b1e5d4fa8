"""Proof domain services: scoring, prover invocation, encoding and simulation.

This package contains the proof bridge logic that should be imported by
HTTP routes, socket handlers and CLI commands, keeping transport concerns
separated from score derivation and outcome reconciliation.
"""
