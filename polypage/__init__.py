"""
polypage - translate Notion database pages into per-language copies.

Reads rows from a source database, machine-translates titles,
descriptions and body blocks, re-hosts images on Supabase Storage, writes
the copies into one destination database per language and records the
resulting links.
"""

__version__ = "0.1.0"
