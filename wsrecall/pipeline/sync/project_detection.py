"""Project detection for local workspace folders.

Looks at well-known manifest files to guess framework, language and package
manager, and maps the result to system tags.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from wsrecall.shared.logging.logger import get_logger
from wsrecall.shared.models.workspace import SYSTEM_TAGS, ProjectInfo, SystemTag

logger = get_logger(__name__)

# package.json dependency -> framework, first match wins
JS_FRAMEWORKS = (
    (("vue", "@vue/cli"), "Vue"),
    (("react",), "React"),
    (("@angular/core",), "Angular"),
    (("svelte",), "Svelte"),
)

LOCKFILES = (
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
    ("package-lock.json", "npm"),
)

# Detected framework/language name (lowercased) -> system tag
PROJECT_TAGS: Dict[str, SystemTag] = {
    "vue": SystemTag.VUE,
    "react": SystemTag.REACT,
    "angular": SystemTag.ANGULAR,
    "svelte": SystemTag.SVELTE,
    "java": SystemTag.JAVA,
    "python": SystemTag.PYTHON,
    "go": SystemTag.GO,
    "rust": SystemTag.RUST,
}


def _detect_package_json(folder: Path, info: ProjectInfo) -> None:
    package_json = folder / "package.json"
    if not package_json.exists():
        return
    info.has_package_json = True

    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.debug(f"[SYNC] Unreadable package.json in {folder}: {e}")
        data = {}

    if not isinstance(data, dict):
        data = {}

    deps: Dict[str, object] = {}
    for key in ("dependencies", "devDependencies"):
        section = data.get(key)
        if isinstance(section, dict):
            deps.update(section)

    for names, framework in JS_FRAMEWORKS:
        if any(name in deps for name in names):
            info.framework = framework
            break

    for lockfile, manager in LOCKFILES:
        if (folder / lockfile).exists():
            info.package_manager = manager
            break


def detect_project_info(path: str) -> Optional[ProjectInfo]:
    """Inspect a local folder; None when it is not a readable directory or nothing was found."""
    folder = Path(path)
    try:
        if not folder.is_dir():
            return None
    except OSError:
        return None

    info = ProjectInfo()
    try:
        _detect_package_json(folder, info)

        if (folder / "pom.xml").exists():
            info.framework = "Maven/Java"
            info.language = "Java"
        if (folder / "Cargo.toml").exists():
            info.language = "Rust"
        if (folder / "go.mod").exists():
            info.language = "Go"
        if (folder / "requirements.txt").exists() or (folder / "pyproject.toml").exists():
            info.language = "Python"
        if (folder / "Dockerfile").exists():
            info.has_dockerfile = True
        if (folder / ".git").exists():
            info.git_repository = "Present"
    except OSError as e:
        logger.warning(f"[SYNC] Failed to detect project info for {path}: {e}")

    return None if info.is_empty() else info


def detect_auto_tags(project_info: Optional[ProjectInfo]) -> List[str]:
    """System tag names for the detected framework and language."""
    if project_info is None:
        return []
    tags: List[str] = []
    for detected in (project_info.framework, project_info.language):
        if not detected:
            continue
        system_tag = PROJECT_TAGS.get(detected.lower())
        if system_tag is not None:
            name = SYSTEM_TAGS[system_tag].name
            if name not in tags:
                tags.append(name)
    return tags
