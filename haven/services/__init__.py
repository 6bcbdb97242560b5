"""Haven services.

Each service is a stateless component with an optional Flask front end:
- safety_service: scores user text and sanitizes generated replies
- crisis_engine: maps risk scores to crisis guidance and resources
- template_service: picks the response strategy for the reply generator
- escalation_client: session-side trend monitoring and periodic escalation
"""
