#!/usr/bin/env python3
"""Seed the built-in interviewers and a demo interview.

Usage:
    python scripts/seed_demo_data.py [organization_id] [lisa_agent_id] [bob_agent_id]

Agent ids are the voice provider agents backing each persona; they can be
filled in later with POST /api/interviews/{id}/update.

Examples:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py org_2abc agent_lisa123 agent_bob456
"""

import sys
from pathlib import Path

# Add parent directory to path so we can import vocalhire
sys.path.insert(0, str(Path(__file__).parent.parent))

from vocalhire.config.constants import INTERVIEWERS
from vocalhire.config.database import SessionLocal, init_db
from vocalhire.models import Interview, Interviewer


def create_interviewer(db, key: str, agent_id: str | None) -> Interviewer:
    """Create or update a built-in interviewer persona."""
    persona = INTERVIEWERS[key]

    existing = db.query(Interviewer).filter(Interviewer.name == persona["name"]).first()
    if existing:
        if agent_id and existing.agent_id != agent_id:
            existing.agent_id = agent_id
            db.commit()
            print(f"  Updated agent for {existing.name} (id={existing.id})")
        else:
            print(f"  Interviewer {existing.name} already exists (id={existing.id})")
        return existing

    interviewer = Interviewer(agent_id=agent_id, **persona)
    db.add(interviewer)
    db.commit()
    db.refresh(interviewer)

    print(f"  Created interviewer: {interviewer.name} (id={interviewer.id})")
    return interviewer


def create_demo_interview(db, organization_id: str, interviewer: Interviewer) -> Interview:
    """Create a short demo interview run by `interviewer`."""
    existing = (
        db.query(Interview)
        .filter(Interview.organization_id == organization_id, Interview.readable_slug == "demo-interview")
        .first()
    )
    if existing:
        print(f"  Demo interview already exists (id={existing.id})")
        return existing

    interview = Interview(
        name="Demo Interview",
        description="A short screening call to try the product.",
        objective="Assess communication skills and motivation for the role.",
        organization_id=organization_id,
        interviewer_id=interviewer.id,
        agent_id=interviewer.agent_id,
        readable_slug="demo-interview",
        questions=[
            {"question": "Tell me about a project you are proud of."},
            {"question": "Why are you interested in this role?"},
        ],
        metric_weights={"communication": 0.5, "motivation": 0.5},
        question_count=2,
        time_duration="10",
    )
    db.add(interview)
    db.commit()
    db.refresh(interview)

    print(f"  Created interview: {interview.name} (id={interview.id})")
    return interview


def main():
    """Seed interviewers and a demo interview."""
    organization_id = sys.argv[1] if len(sys.argv) >= 2 else "demo-org"
    lisa_agent = sys.argv[2] if len(sys.argv) >= 3 else None
    bob_agent = sys.argv[3] if len(sys.argv) >= 4 else None

    init_db()

    db = SessionLocal()
    try:
        print("\n1. Creating interviewers...")
        lisa = create_interviewer(db, "LISA", lisa_agent)
        create_interviewer(db, "BOB", bob_agent)

        print("\n2. Creating demo interview...")
        interview = create_demo_interview(db, organization_id, lisa)

        print("\n" + "="*50)
        print("Demo data seeded successfully!")
        print("="*50)
        print(f"  Organization: {organization_id}")
        print(f"  Interview ID: {interview.id}")
        if not lisa.agent_id:
            print("\nNo agent id given: set one before registering calls.")

    finally:
        db.close()


if __name__ == "__main__":
    main()
