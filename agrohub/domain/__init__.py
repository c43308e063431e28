"""Domain Layer: value objects, models, ports and events.

Has no dependency on provider SDKs or storage backends.
"""
