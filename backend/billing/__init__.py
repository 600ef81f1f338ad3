"""Greeting-card shop billing backend: invoices, catalog, company profile."""
