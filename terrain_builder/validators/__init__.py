"""Per-concern check functions used by TerrainValidator."""
