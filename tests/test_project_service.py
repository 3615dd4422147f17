"""
Tests for ProjectService against the in-memory Supabase fake.
"""

import json

import pytest
from fastapi import HTTPException

from conftest import FakeAPIError, make_phases
from project_partner.modules.projects.schemas import ProjectCreate, ProjectUpdate
from project_partner.modules.projects.service import ProjectService, transform_project, is_duplicate_name_error


def _project(**overrides):
    row = {
        "id": "proj-1",
        "name": "Interior Painting",
        "description": "Paint a room",
        "category": ["Painting & Finishing"],
        "publish_status": "published",
        "project_type": "primary",
        "phases": [],
        "updated_at": "2026-01-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


class TestTransformProject:

    def test_phases_from_double_encoded_string(self):
        phases = make_phases(1)
        project = transform_project(_project(phases=json.dumps(json.dumps(phases))))
        assert project.phases == phases

    def test_unparseable_phases_become_empty(self):
        assert transform_project(_project(phases="{broken")).phases == []

    def test_project_type_and_category(self):
        project = transform_project(_project(project_type="SECONDARY", category="TileFlooring"))
        assert project.project_type == "Secondary"
        assert sorted(project.category) == ["Flooring", "Tile"]
        assert transform_project(_project(project_type=None)).project_type == "Primary"


class TestDuplicateNames:

    def test_duplicate_error_detection(self):
        assert is_duplicate_name_error(FakeAPIError('duplicate key violates "idx_projects_name_unique"', code="23505"))
        assert not is_duplicate_name_error(FakeAPIError("duplicate key on other index", code="23505"))
        assert not is_duplicate_name_error(Exception("idx_projects_name_unique"))

    def test_create_rejects_case_insensitive_duplicate(self, supabase):
        supabase.seed("projects", _project(name="Interior Painting"))
        service = ProjectService(supabase)

        with pytest.raises(HTTPException) as exc:
            service.create_project(ProjectCreate(name="  interior painting "), "admin-1")

        assert exc.value.status_code == 409
        assert supabase.rpc_calls == []

    def test_rpc_unique_violation_maps_to_409(self, supabase):
        def rpc(params):
            raise FakeAPIError('duplicate key value violates unique constraint "idx_projects_name_unique"', code="23505")

        supabase.rpc_handlers["create_project_with_standard_foundation_v2"] = rpc
        with pytest.raises(HTTPException) as exc:
            ProjectService(supabase).create_project(ProjectCreate(name="Deck Staining"), "admin-1")
        assert exc.value.status_code == 409

    def test_update_allows_keeping_own_name(self, supabase):
        supabase.seed("projects", _project())
        updated = ProjectService(supabase).update_project("proj-1", ProjectUpdate(name="Interior Painting"))
        assert updated.name == "Interior Painting"

    def test_update_rejects_other_projects_name(self, supabase):
        supabase.seed("projects", _project(), _project(id="proj-2", name="Tile Backsplash"))
        with pytest.raises(HTTPException) as exc:
            ProjectService(supabase).update_project("proj-1", ProjectUpdate(name="TILE BACKSPLASH"))
        assert exc.value.status_code == 409


class TestCreateProject:

    def _rpc_creating_row(self, supabase):
        def rpc(params):
            supabase.seed("projects", _project(
                id="new-proj",
                name=params["p_project_name"],
                description=params["p_project_description"],
                category=[params["p_category"]],
                publish_status="draft",
                phases=make_phases(1, 1, 1, 1),
            ))
            return "new-proj"
        supabase.rpc_handlers["create_project_with_standard_foundation_v2"] = rpc

    def test_creates_with_defaults(self, supabase):
        self._rpc_creating_row(supabase)
        project = ProjectService(supabase).create_project(
            ProjectCreate(name="Deck Staining", category=["Decks & Patios"], project_type="Secondary"),
            "admin-1",
        )

        assert project.id == "new-proj"
        assert project.skill_level == "Intermediate"
        assert project.effort_level == "Medium"
        assert project.project_type == "Secondary"
        assert len(project.phases) == 4
        name, params = supabase.rpc_calls[0]
        assert params["p_category"] == "Decks & Patios"
        assert supabase.rows("projects")[0]["created_by"] == "admin-1"

    def test_category_defaults_to_general(self, supabase):
        self._rpc_creating_row(supabase)
        ProjectService(supabase).create_project(ProjectCreate(name="Shelf"), "admin-1")
        assert supabase.rpc_calls[0][1]["p_category"] == "general"

    def test_follow_up_update_failure_is_not_fatal(self, supabase):
        self._rpc_creating_row(supabase)
        supabase.fail("projects", "update")
        project = ProjectService(supabase).create_project(ProjectCreate(name="Shelf"), "admin-1")
        assert project.id == "new-proj"
        assert project.skill_level is None

    def test_missing_id_is_500(self, supabase):
        supabase.rpc_handlers["create_project_with_standard_foundation_v2"] = lambda params: None
        with pytest.raises(HTTPException) as exc:
            ProjectService(supabase).create_project(ProjectCreate(name="Shelf"), "admin-1")
        assert exc.value.status_code == 500


class TestQueries:

    def test_list_projects_filters(self, supabase):
        supabase.seed(
            "projects",
            _project(id="a", name="Interior Painting", publish_status="published", updated_at="2026-01-01"),
            _project(id="b", name="Tile Floor", description="Lay tile", publish_status="draft", updated_at="2026-02-01"),
            _project(id="c", name="Deck", description="Stain the deck", publish_status="draft", updated_at="2026-03-01"),
        )
        service = ProjectService(supabase)

        assert [p.id for p in service.list_projects()] == ["c", "b", "a"]
        assert [p.id for p in service.list_projects(publish_status="draft")] == ["c", "b"]
        assert [p.id for p in service.list_projects(search="TILE")] == ["b"]
        assert [p.id for p in service.list_projects(search="stain")] == ["c"]

    def test_get_missing_project_is_404(self, supabase):
        with pytest.raises(HTTPException) as exc:
            ProjectService(supabase).get_project("missing")
        assert exc.value.status_code == 404

    def test_delete_missing_project_is_404(self, supabase):
        with pytest.raises(HTTPException) as exc:
            ProjectService(supabase).delete_project("missing")
        assert exc.value.status_code == 404

    def test_rebuild_phases_calls_rpc(self, supabase):
        supabase.seed("projects", _project())
        ProjectService(supabase).rebuild_phases("proj-1")
        assert supabase.rpc_calls == [("rebuild_phases_json_from_project_phases", {"p_project_id": "proj-1"})]


class TestStepInstructions:

    def _instruction(self, id, level, videos):
        return {
            "id": id,
            "template_step_id": "step-1",
            "instruction_level": level,
            "content": json.dumps({"text": f"{level} text", "sections": [], "photos": [], "videos": videos, "links": []}),
        }

    def test_untrusted_videos_are_dropped(self, supabase):
        supabase.seed("step_instructions", self._instruction("i1", "detailed", [
            {"title": "Cutting in", "embed": '<iframe src="https://www.youtube.com/embed/abc"></iframe>'},
            {"title": "Sketchy", "url": "https://evil.example.com/v.mp4"},
        ]))
        instructions = ProjectService(supabase).get_step_instructions("step-1")

        assert len(instructions) == 1
        assert instructions[0].text == "detailed text"
        assert instructions[0].videos == [{"title": "Cutting in", "url": "https://www.youtube.com/embed/abc"}]

    def test_filter_by_level(self, supabase):
        supabase.seed(
            "step_instructions",
            self._instruction("i1", "quick", []),
            self._instruction("i2", "contractor", []),
        )
        instructions = ProjectService(supabase).get_step_instructions("step-1", "contractor")
        assert [i.id for i in instructions] == ["i2"]
