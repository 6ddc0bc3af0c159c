"""Optimistic subject synchronisation: query cache, mutations and the subjects API."""
