"""Traveler capacity relay: enrich capacity declarations and forward them to n8n."""
