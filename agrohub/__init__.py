"""AgroHub advisory client.

Resilient access layer for the generative-AI lookups used by the AgroHub
marketplace: location to currency resolution, crop price suggestions and
agricultural weather advice.
"""

__version__ = "0.1.0"
