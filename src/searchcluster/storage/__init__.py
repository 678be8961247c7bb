"""SearchCluster Storage Layer - Full-text storage engines."""
