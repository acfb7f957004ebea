"""wsrecall: track, tag and re-open VS Code workspaces (local, WSL, remote)."""
