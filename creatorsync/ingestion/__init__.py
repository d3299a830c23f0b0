"""
CreatorSync Ingestion Module
============================

Feed and archive ingestion for a single target.

This module handles:
- RSS/Atom feed fetching and parsing
- URL normalization, date resolution and body extraction
- Archive supplementation for hosts with a public archive page
- Feed URL discovery for new content owners
"""
