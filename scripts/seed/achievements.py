"""Seed the achievement catalog.

Idempotent: achievements are matched on ``code`` and only missing ones are
inserted. Existing rows are left untouched so edited thresholds survive
re-seeding.
"""

import asyncio

from libs.db.config import AsyncSessionLocal
from services.fitness_service.models import Achievement, AchievementMetric
from sqlalchemy import select

ACHIEVEMENTS = [
    # (code, title, description, metric, threshold, points, icon)
    ("first_step", "First Step", "Complete your first exercise",
     AchievementMetric.TOTAL_EXERCISES, 1, 50, "🏅"),
    ("persistent_athlete", "Persistent Athlete", "Complete 10 exercises",
     AchievementMetric.TOTAL_EXERCISES, 10, 100, "💪"),
    ("fitness_champion", "Fitness Champion", "Complete 50 exercises",
     AchievementMetric.TOTAL_EXERCISES, 50, 250, "🏆"),
    ("adventure_master", "Adventure Master", "Complete 100 exercises",
     AchievementMetric.TOTAL_EXERCISES, 100, 500, "⭐"),
    ("point_collector", "Point Collector", "Earn 100 points",
     AchievementMetric.TOTAL_POINTS, 100, 50, "💎"),
    ("point_hoarder", "Point Hoarder", "Earn 500 points",
     AchievementMetric.TOTAL_POINTS, 500, 100, "💰"),
    ("point_tycoon", "Point Tycoon", "Earn 1000 points",
     AchievementMetric.TOTAL_POINTS, 1000, 200, "👑"),
    ("consistency", "Consistency", "Exercise 3 days in a row",
     AchievementMetric.STREAK_DAYS, 3, 75, "🔥"),
    ("power_week", "Power Week", "Exercise 7 days in a row",
     AchievementMetric.STREAK_DAYS, 7, 150, "🚀"),
    ("power_month", "Power Month", "Exercise 30 days in a row",
     AchievementMetric.STREAK_DAYS, 30, 500, "⚡"),
]


async def seed_achievements():
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Achievement.code))
        existing = set(result.scalars().all())

        added = 0
        for code, title, description, metric, threshold, points, icon in ACHIEVEMENTS:
            if code in existing:
                continue
            session.add(
                Achievement(
                    code=code,
                    title=title,
                    description=description,
                    metric=metric,
                    threshold_value=threshold,
                    points_reward=points,
                    icon=icon,
                    is_active=True,
                )
            )
            added += 1

        await session.commit()
        print(f"  Seeded {added} achievements ({len(existing)} already present)")


if __name__ == "__main__":
    asyncio.run(seed_achievements())
