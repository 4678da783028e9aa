"""
Functional tests for project CRUD, hierarchy and access control.
"""

import pytest


class TestProjectCrud:
    def test_create_project_makes_owner_an_admin_member(self, client, owner):
        response = client.post(
            "/api/projects",
            json={"name": "  Launch  ", "status": "进行中", "priority": "高", "tags": "web, q3"},
            headers=owner["headers"],
        )

        assert response.status_code == 201
        project = response.json()["data"]
        assert project["name"] == "Launch"
        assert project["status"] == "active"
        assert project["priority"] == "high"
        assert project["tags"] == ["web", "q3"]
        assert project["owner_id"] == owner["user"]["id"]
        assert project["user_role"] == "owner"
        assert project["member_count"] == 1
        assert project["progress"] == 0

        members = client.get(f"/api/projects/{project['id']}/members", headers=owner["headers"])
        roles = {(m["user_id"], m["role"]) for m in members.json()["data"]["members"]}
        assert roles == {(owner["user"]["id"], "admin")}

    def test_create_project_defaults(self, client, owner, make_project):
        project = make_project(owner["headers"])

        assert project["status"] == "planning"
        assert project["priority"] == "medium"
        assert project["parent_id"] is None

    def test_invalid_status_is_rejected(self, client, owner):
        response = client.post(
            "/api/projects", json={"name": "X", "status": "someday"}, headers=owner["headers"]
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid status: someday"

    def test_get_update_delete(self, client, owner, make_project):
        project = make_project(owner["headers"])
        url = f"/api/projects/{project['id']}"

        fetched = client.get(url, headers=owner["headers"])
        assert fetched.status_code == 200
        assert fetched.json()["data"]["id"] == project["id"]

        updated = client.put(
            url, json={"name": "Renamed", "status": "completed"}, headers=owner["headers"]
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["name"] == "Renamed"
        assert updated.json()["data"]["status"] == "completed"

        deleted = client.delete(url, headers=owner["headers"])
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Project deleted successfully"

        assert client.get(url, headers=owner["headers"]).status_code == 404

    def test_empty_update_is_rejected(self, client, owner, make_project):
        project = make_project(owner["headers"])

        response = client.put(f"/api/projects/{project['id']}", json={}, headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "No fields to update"

    @pytest.mark.parametrize("body", [{"status": ""}, {"priority": None}, {"status": None, "priority": ""}])
    def test_blank_status_or_priority_is_not_an_update(self, client, owner, make_project, body):
        project = make_project(owner["headers"])

        response = client.put(f"/api/projects/{project['id']}", json=body, headers=owner["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "No fields to update"

    def test_blank_status_is_ignored_next_to_other_fields(self, client, owner, make_project):
        project = make_project(owner["headers"], priority="high")

        response = client.put(
            f"/api/projects/{project['id']}",
            json={"status": "", "priority": None, "name": "Renamed"},
            headers=owner["headers"],
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Renamed"
        assert data["status"] == "planning"
        assert data["priority"] == "high"

    def test_deleting_a_parent_detaches_children(self, client, owner, make_project):
        parent = make_project(owner["headers"], name="Parent")
        child = make_project(owner["headers"], name="Child", parentId=parent["id"])

        client.delete(f"/api/projects/{parent['id']}", headers=owner["headers"])

        response = client.get(f"/api/projects/{child['id']}", headers=owner["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["parent_id"] is None


class TestProjectListing:
    def test_list_is_paginated_under_projects_key(self, client, owner, make_project):
        for i in range(3):
            make_project(owner["headers"], name=f"Project {i}")

        response = client.get("/api/projects?page=1&limit=2", headers=owner["headers"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["projects"]) == 2
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "has_more": True}

    def test_list_filters_by_status_label(self, client, owner, make_project):
        make_project(owner["headers"], name="Running", status="active")
        make_project(owner["headers"], name="Idle", status="paused")

        response = client.get("/api/projects", params={"status": "已暂停"}, headers=owner["headers"])

        names = [p["name"] for p in response.json()["data"]["projects"]]
        assert names == ["Idle"]

    def test_list_rejects_unknown_priority(self, client, owner):
        response = client.get("/api/projects?priority=urgent", headers=owner["headers"])

        assert response.status_code == 400

    def test_empty_parent_id_lists_roots_only(self, client, owner, make_project):
        root = make_project(owner["headers"], name="Root")
        make_project(owner["headers"], name="Leaf", parentId=root["id"])

        response = client.get("/api/projects?parent_id=", headers=owner["headers"])

        names = [p["name"] for p in response.json()["data"]["projects"]]
        assert names == ["Root"]

    def test_other_users_projects_are_invisible(self, client, owner, outsider, make_project):
        project = make_project(owner["headers"])

        listing = client.get("/api/projects", headers=outsider["headers"])
        direct = client.get(f"/api/projects/{project['id']}", headers=outsider["headers"])

        assert listing.json()["data"]["projects"] == []
        assert direct.status_code == 404
        assert direct.json()["message"] == "Project not found"

    def test_statistics(self, client, owner, make_project):
        make_project(owner["headers"], name="A", status="active", priority="high")
        make_project(owner["headers"], name="B", status="completed")

        response = client.get("/api/projects/statistics", headers=owner["headers"])

        stats = response.json()["data"]
        assert stats["total_projects"] == 2
        assert stats["active_projects"] == 1
        assert stats["completed_projects"] == 1
        assert stats["high_priority_projects"] == 1


class TestProjectHierarchy:
    @pytest.fixture
    def family(self, owner, make_project):
        root = make_project(owner["headers"], name="Root")
        child = make_project(owner["headers"], name="Child", parentId=root["id"])
        grandchild = make_project(owner["headers"], name="Grandchild", parentId=child["id"])
        return root, child, grandchild

    def test_tree_nests_children(self, client, owner, family):
        response = client.get("/api/projects/tree", headers=owner["headers"])

        roots = response.json()["data"]["projects"]
        assert [r["name"] for r in roots] == ["Root"]
        child = roots[0]["children"][0]
        assert child["name"] == "Child"
        assert [g["name"] for g in child["children"]] == ["Grandchild"]

    def test_tree_search_keeps_ancestors_of_matches(self, client, owner, family, make_project):
        make_project(owner["headers"], name="Unrelated")

        response = client.get("/api/projects/tree?search=grand", headers=owner["headers"])

        roots = response.json()["data"]["projects"]
        assert [r["name"] for r in roots] == ["Root"]
        assert roots[0]["children"][0]["children"][0]["name"] == "Grandchild"

    def test_path_runs_from_root_to_project(self, client, owner, family):
        _, _, grandchild = family

        response = client.get(f"/api/projects/{grandchild['id']}/path", headers=owner["headers"])

        assert [p["name"] for p in response.json()["data"]["path"]] == ["Root", "Child", "Grandchild"]

    def test_sub_projects(self, client, owner, family):
        root, _, _ = family

        response = client.get(f"/api/projects/{root['id']}/sub-projects", headers=owner["headers"])

        assert [p["name"] for p in response.json()["data"]["projects"]] == ["Child"]

    def test_project_cannot_be_its_own_parent(self, client, owner, family):
        root, _, _ = family

        response = client.put(
            f"/api/projects/{root['id']}", json={"parentId": root["id"]}, headers=owner["headers"]
        )

        assert response.status_code == 400
        assert response.json()["message"] == "A project cannot be its own parent"

    def test_project_cannot_move_under_a_descendant(self, client, owner, family):
        root, _, grandchild = family

        response = client.put(
            f"/api/projects/{root['id']}",
            json={"parentId": grandchild["id"]},
            headers=owner["headers"],
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot move a project under one of its descendants"

    def test_inaccessible_parent_is_not_found(self, client, owner, outsider, make_project):
        foreign = make_project(outsider["headers"], name="Foreign")

        response = client.post(
            "/api/projects", json={"name": "Mine", "parentId": foreign["id"]}, headers=owner["headers"]
        )

        assert response.status_code == 404


class TestProjectPermissions:
    @pytest.fixture
    def shared_project(self, client, owner, make_user, make_project):
        project = make_project(owner["headers"])
        member = make_user(username="member")
        observer = make_user(username="observer")
        client.post(
            f"/api/projects/{project['id']}/members",
            json={"userId": member["user"]["id"], "role": "member"},
            headers=owner["headers"],
        )
        client.post(
            f"/api/projects/{project['id']}/members",
            json={"userId": observer["user"]["id"], "role": "observer"},
            headers=owner["headers"],
        )
        return project, member, observer

    def test_members_can_read_and_see_their_role(self, client, shared_project):
        project, member, observer = shared_project

        as_member = client.get(f"/api/projects/{project['id']}", headers=member["headers"])
        as_observer = client.get(f"/api/projects/{project['id']}", headers=observer["headers"])

        assert as_member.json()["data"]["user_role"] == "member"
        assert as_observer.json()["data"]["user_role"] == "observer"

    def test_member_cannot_update_project(self, client, shared_project):
        project, member, _ = shared_project

        response = client.put(
            f"/api/projects/{project['id']}", json={"name": "Hijacked"}, headers=member["headers"]
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Permission denied: project:update"

    def test_only_owner_can_delete(self, client, owner, make_user, make_project):
        project = make_project(owner["headers"])
        admin = make_user(username="admin")
        client.post(
            f"/api/projects/{project['id']}/members",
            json={"userId": admin["user"]["id"], "role": "admin"},
            headers=owner["headers"],
        )

        response = client.delete(f"/api/projects/{project['id']}", headers=admin["headers"])

        assert response.status_code == 403

    def test_observer_cannot_create_tasks(self, client, shared_project):
        project, _, observer = shared_project

        response = client.post(
            f"/api/projects/{project['id']}/tasks", json={"title": "Nope"}, headers=observer["headers"]
        )

        assert response.status_code == 403

    def test_member_projects_lists_memberships_with_roles(self, client, shared_project):
        project, member, _ = shared_project

        response = client.get("/api/projects/user/projects", headers=member["headers"])

        projects = response.json()["data"]["projects"]
        assert [(p["id"], p["user_role"]) for p in projects] == [(project["id"], "member")]
