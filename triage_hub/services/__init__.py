"""
Services layer - business logic lives here, not in routes.

- fallback: deterministic rules used when the classifier is unavailable
- classifier: gateway to the external classifier service
- realtime: room registry, fanout dispatcher and inbound channel
- collaborators: authentication and message storage adapters
"""
