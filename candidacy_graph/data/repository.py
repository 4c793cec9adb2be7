"""
Record Repository

Read side of the application record store, as a local JSON snapshot. The
record store itself (users, applications, account management) is an external
system; a snapshot exported from it is what the graph is rebuilt from when
running outside a request (Dagster assets, CLI).

This module is Dagster-agnostic - it can be used standalone or orchestrated by Dagster.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple
from datetime import datetime
import json

from candidacy_graph.config import DATA_DIR
from candidacy_graph.errors import ValidationError


class RecordRepository:
    """
    Manages the snapshot directory and loads rebuild input from it.
    
    Directory Structure:
    data/
    └── records/
        ├── applications.json         # [{user_id, target_user_id, priority, ...}]
        ├── users.json                # [{id, full_name, ...}]
        └── metadata.json             # Export timestamps, row counts
    """
    
    def __init__(self, base_path: str = DATA_DIR):
        """
        Initialize the record repository.
        
        Args:
            base_path: Base directory for all data storage
        """
        self.base_path = Path(base_path)
        self._ensure_structure()
    
    def _ensure_structure(self):
        """Create the directory structure if it doesn't exist."""
        self.records_dir.mkdir(parents=True, exist_ok=True)
    
    # ==========================================================================
    # Paths
    # ==========================================================================
    
    @property
    def records_dir(self) -> Path:
        """Directory for record store snapshots."""
        return self.base_path / "records"
    
    @property
    def applications_path(self) -> Path:
        return self.records_dir / "applications.json"
    
    @property
    def users_path(self) -> Path:
        return self.records_dir / "users.json"
    
    @property
    def metadata_path(self) -> Path:
        return self.records_dir / "metadata.json"
    
    # ==========================================================================
    # Loading
    # ==========================================================================
    
    def _load_rows(self, path: Path) -> List[Dict[str, Any]]:
        try:
            with open(path) as f:
                rows = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{path.name} is not valid JSON: {e}") from e
        if not isinstance(rows, list):
            raise ValidationError(f"{path.name} must contain a JSON list")
        return rows
    
    def load_applications(self) -> List[Dict[str, Any]]:
        """Raw application rows, validated later by the graph builder."""
        if not self.applications_path.exists():
            raise FileNotFoundError(f"No applications snapshot at {self.applications_path}")
        return self._load_rows(self.applications_path)
    
    def load_users(self) -> List[Dict[str, Any]]:
        """Raw user rows. A missing users snapshot means no names are known."""
        if not self.users_path.exists():
            return []
        return self._load_rows(self.users_path)
    
    def names_by_id(self) -> Dict[str, Optional[str]]:
        """{user id: full_name} for every user row that has an id."""
        names = {}
        for user in self.load_users():
            if isinstance(user, dict) and user.get("id") is not None:
                names[str(user["id"])] = user.get("full_name")
        return names
    
    def load_rebuild_input(self) -> Tuple[List[Dict[str, Any]], Dict[str, Optional[str]]]:
        """(applications, names_by_id) ready for builder.rebuild."""
        return self.load_applications(), self.names_by_id()
    
    # ==========================================================================
    # Saving
    # ==========================================================================
    
    def save_snapshot(self, applications: List[Dict[str, Any]], users: List[Dict[str, Any]]):
        """Write a fresh snapshot and record when it was taken."""
        self._ensure_structure()
        with open(self.applications_path, 'w') as f:
            json.dump(applications, f, indent=2, default=str)
        with open(self.users_path, 'w') as f:
            json.dump(users, f, indent=2, default=str)
        
        self.save_metadata({
            'exported_at': datetime.now().isoformat(),
            'applications': len(applications),
            'users': len(users),
        })
    
    def load_metadata(self) -> Dict[str, Any]:
        """Load snapshot metadata, empty if none was recorded."""
        if not self.metadata_path.exists():
            return {}
        
        with open(self.metadata_path) as f:
            return json.load(f)
    
    def save_metadata(self, metadata: Dict[str, Any]):
        with open(self.metadata_path, 'w') as f:
            json.dump(metadata, f, indent=2, default=str)
    
    def is_snapshot_fresh(self, max_age_days: int = 1) -> bool:
        """
        Check if the applications snapshot was written recently.
        
        Args:
            max_age_days: Maximum age in days
            
        Returns:
            True if the snapshot exists and is fresh
        """
        if not self.applications_path.exists():
            return False
        
        file_age = datetime.now() - datetime.fromtimestamp(self.applications_path.stat().st_mtime)
        return file_age.days < max_age_days

