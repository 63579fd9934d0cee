"""Storefront catalog: faceted category browsing and filtering."""
