import logging
from pathlib import Path

import pytest

from manifold.project import Project


@pytest.fixture(autouse=True)
def enable_manifold_logger_propagation():
    """
    Enable log propagation for the manifold logger during tests.

    The manifold logger has propagate=False by default (set in context.py),
    which prevents pytest's caplog fixture from capturing log messages.
    """
    manifold_logger = logging.getLogger("manifold")
    original_propagate = manifold_logger.propagate
    manifold_logger.propagate = True
    yield
    manifold_logger.propagate = original_propagate


USER_VECTOR = """\
attributes:
  user_id: string:required
  email: string
  address:
    city: string
    zip: string:required
"""

MANIFOLD_YML = """\
vectors:
  - User

dimensions:
  merge:
    source: lib/dimensions.sql

timestamp:
  field: timestamp
  interval: DAY

partitioning:
  interval: DAY

metrics:
  renders:
    source: analytics.render_events
    conditions:
      mobile: device = 'mobile'
      desktop: device = 'desktop'
      us: country = 'US'
      global: country != 'US'
    breakouts:
      device: [mobile, desktop]
      region: [us, global]
    aggregations:
      countif: renderCount
      sumif:
        renderDuration:
          field: duration
"""


@pytest.fixture
def project(tmp_path: Path) -> Project:
    """A project with a User vector and a Core workspace ready to generate."""
    project = Project.create("analytics", tmp_path / "analytics")
    (project.vectors_directory / "user.yml").write_text(USER_VECTOR)

    workspace = project.add_workspace("Core")
    workspace.manifold_path.write_text(MANIFOLD_YML)
    (workspace.directory / "lib").mkdir()
    (workspace.directory / "lib" / "dimensions.sql").write_text(
        "SELECT user_id AS id, STRUCT(email) AS dimensions FROM analytics.users\n"
    )
    return project
