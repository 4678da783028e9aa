"""
Unit tests for project progress calculation and recomputation.
"""

from unittest.mock import MagicMock, call

import pytest

from taskhub.server.services.project_service import ProjectService, calculate_progress


class TestCalculateProgress:
    @pytest.mark.parametrize(
        "total,completed,expected",
        [(0, 0, 0), (4, 1, 25.0), (3, 1, 33.33), (3, 2, 66.67), (5, 5, 100.0)],
    )
    def test_percentage_of_completed_tasks(self, total, completed, expected):
        assert calculate_progress(total, completed) == expected


class TestUpdateAllProjectsProgress:
    def setup_method(self):
        self.project_repository = MagicMock()
        self.service = ProjectService(self.project_repository, MagicMock(), MagicMock())

    def test_every_project_is_recomputed(self):
        counts = {"p1": (4, 1), "p2": (0, 0), "p3": (2, 2)}
        self.project_repository.find_all_ids.return_value = list(counts)
        self.project_repository.count_tasks.side_effect = counts.__getitem__

        assert self.service.update_all_projects_progress() == 3

        assert self.project_repository.update_progress.call_args_list == [
            call("p1", 25.0),
            call("p2", 0),
            call("p3", 100.0),
        ]

    def test_no_projects(self):
        self.project_repository.find_all_ids.return_value = []

        assert self.service.update_all_projects_progress() == 0
        self.project_repository.update_progress.assert_not_called()
