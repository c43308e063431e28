"""Domain models shared by the resolvers and the infrastructure adapters."""
