"""Haven: safety risk assessment and escalation for supportive chat."""
