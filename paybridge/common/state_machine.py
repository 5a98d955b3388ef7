"""Per-request routing states enforced by the payment orchestrator."""

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "RECEIVED": {"VALIDATED"},
    # FALLBACK_SIMULATED from VALIDATED/ROUTE_SIMULATED only on unexpected errors.
    "VALIDATED": {"ROUTE_SIMULATED", "ROUTE_GATEWAY", "FALLBACK_SIMULATED"},
    "ROUTE_SIMULATED": {"RESOLVED", "FALLBACK_SIMULATED"},
    "ROUTE_GATEWAY": {"RESOLVED", "FALLBACK_SIMULATED"},
    "FALLBACK_SIMULATED": {"RESOLVED"},
    "RESOLVED": set(),
}


def validate_transition(current: str, new: str) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValueError(f"Invalid transition: {current} -> {new}")
