"""Application – export orchestration and caller pagination state."""
