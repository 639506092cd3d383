"""Database setup and initialization helpers."""

from __future__ import annotations

import logging

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

logger = logging.getLogger(__name__)


def init_db():
    """Create tables and seed an admin + demo worker if not present."""
    db.create_all()
    from safetyfirst.models import Team, TeamMember, User  # noqa: WPS433

    admin = User.query.filter_by(external_id="admin-demo").first()
    if not admin:
        admin = User(external_id="admin-demo", email="admin@safetyfirst.local", name="Safety Admin", role="admin")
        db.session.add(admin)
        logger.info("Seeded admin user admin-demo")

    worker = User.query.filter_by(external_id="worker-demo").first()
    if not worker:
        worker = User(
            external_id="worker-demo",
            email="worker@safetyfirst.local",
            name="Demo Worker",
            role="worker",
            age=34,
            years_experience=6,
            gender="male",
            job_title="Scaffolder",
            department="Construction",
        )
        db.session.add(worker)
        logger.info("Seeded worker user worker-demo")

    team = Team.query.filter_by(name="Demo Crew").first()
    if not team:
        team = Team(name="Demo Crew", description="Seeded demo team")
        db.session.add(team)
    db.session.flush()

    if not TeamMember.query.filter_by(team_id=team.id, user_id=worker.id).first():
        db.session.add(TeamMember(team_id=team.id, user_id=worker.id))

    db.session.commit()
