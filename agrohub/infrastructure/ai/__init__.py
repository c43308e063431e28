"""AI Model Implementations.

Contains specific clients/adapters for different AI providers (Gemini via
its OpenAI-compatible endpoint, OpenAI, Groq), each implementing the
`AIModel` interface from the domain layer.
"""
