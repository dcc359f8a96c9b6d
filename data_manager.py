"""
Data Manager for Family Tree.
Loads/saves the member snapshot of one user's tree as JSON + Logging.
Supports Multi-Tenancy (User Isolation).
"""

import json
import os
from typing import List, Optional, Sequence

from family_models import SEX_FEMALE, SEX_MALE, PersonRecord
from graph_builder import RecordLike, coerce_records
from layout_engine import LayoutEngine
from tree_pipeline import FamilyTreePipeline, FamilyTreeResult
from utils.logger_service import ROOT_DATA_DIR, LoggerService

PROJECT_FILE_NAME = "family.tree"


class DataManager:
    def __init__(self, username: str, root_data_dir: str = ROOT_DATA_DIR):
        self.username = username
        self.records: List[PersonRecord] = []
        self.next_person_id = 1

        # Головна папка даних
        self.root_data_dir = root_data_dir
        # Папка конкретного користувача
        self.project_directory = os.path.join(self.root_data_dir, self.username)
        # Файл дерева користувача
        self.project_file_path = os.path.join(self.project_directory, PROJECT_FILE_NAME)

        os.makedirs(self.project_directory, exist_ok=True)
        self.logger = LoggerService(os.path.join(self.root_data_dir, "activity_log.csv"), user=username)

    def load_project(self) -> bool:
        """Loads the member list from the user's folder. A missing file is an empty tree."""
        if not os.path.exists(self.project_file_path):
            self.records = []
            return True
        try:
            with open(self.project_file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            members = data.get('members', []) if isinstance(data, dict) else data
            self.records = coerce_records(members)
        except (OSError, ValueError, TypeError) as e:
            print(f"Error loading project: {e}")
            self.logger.log("LOAD_FAILED", f"{self.project_file_path}: {e}")
            return False

        self._update_next_id()
        self.logger.log("LOAD_PROJECT", f"{len(self.records)} members")
        return True

    def save_project(self) -> bool:
        try:
            data = {'members': [r.to_dict() for r in self.records]}
            with open(self.project_file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            print(f"Error saving project: {e}")
            return False
        self.logger.log("SAVE_PROJECT", f"{len(self.records)} members")
        return True

    def set_members(self, members: Sequence[RecordLike]):
        """Replaces the whole snapshot."""
        self.records = coerce_records(members)
        self._update_next_id()

    def _update_next_id(self):
        numeric = [int(r.id) for r in self.records if r.id.isdigit()]
        self.next_person_id = max(numeric) + 1 if numeric else 1

    def add_person(self, name: str, sex: str = None, **relations) -> str:
        person_id = str(self.next_person_id)
        self.next_person_id += 1
        self.records.append(PersonRecord(id=person_id, name=name, sex=sex or 'other', **relations))
        self.logger.log("ADD_PERSON", f"User {self.username} created {name} (ID: {person_id})")
        return person_id

    def get_person(self, person_id: str) -> Optional[PersonRecord]:
        # last write wins, як і в побудові графа
        found = None
        for record in self.records:
            if record.id == person_id:
                found = record
        return found

    def get_all_people(self) -> list:
        return [(r.id, r.name) for r in self.records]

    def build_tree(self, engine: LayoutEngine = None, from_all_roots: bool = False) -> FamilyTreeResult:
        pipeline = FamilyTreePipeline(engine=engine, logger=self.logger, from_all_roots=from_all_roots)
        return pipeline.run(self.records)

    def create_test_data(self):
        adam = self.add_person("Adam", SEX_MALE)
        eve = self.add_person("Eve", SEX_FEMALE, spouse_id=adam)
        self.add_person("Cain", SEX_MALE, father_id=adam, mother_id=eve)
        self.add_person("Abel", SEX_MALE, father_id=adam, mother_id=eve)
        seth = self.add_person("Seth", SEX_MALE, father_id=adam, mother_id=eve)
        self.add_person("Enosh", SEX_MALE, father_id=seth)
        self.save_project()
