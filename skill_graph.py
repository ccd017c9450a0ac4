import re

from skill_system.models import Requirement, Skill, SkillCatalog

# skill_graph.py

# This is the default bodyweight skill tree.
# Each row is one skill (a node): id, title, category, level, sets, reps.
# The last column lists its prerequisites (the nodes that have an edge leading to it).

DEFAULT_SKILLS = [
    ("push-wall-pushup", "Wall Push-Up", "Push", 1, 3, 15, []),
    ("push-elevated-pushup", "Elevated Push-Up", "Push", 1, 3, 12, []),
    ("push-box-pushup", "Box Push-Up", "Push", 1, 3, 10, []),
    ("push-incline-pushup", "Incline Push-Up", "Push", 2, 3, 12, ["push-wall-pushup"]),
    ("push-knee-pushup", "Knee Push-Up", "Push", 3, 3, 10, ["push-incline-pushup"]),
    ("push-full-pushup", "Full Push-Up", "Push", 4, 3, 8, ["push-knee-pushup"]),
    ("push-diamond-pushup", "Diamond Push-Up", "Push", 5, 3, 8, ["push-full-pushup"]),
    ("push-decline-pushup", "Decline Push-Up", "Push", 6, 3, 8, ["push-full-pushup"]),
    ("pull-wall-angel", "Wall Angels", "Pull", 1, 3, 12, []),
    ("pull-doorway-row", "Doorway Row", "Pull", 2, 3, 10, ["pull-wall-angel"]),
    ("pull-inverted-row", "Inverted Row", "Pull", 3, 3, 8, ["pull-doorway-row"]),
    ("pull-australian-pullup", "Australian Pull-Up", "Pull", 4, 3, 8, ["pull-inverted-row"]),
    ("pull-negative-pullup", "Negative Pull-Up", "Pull", 5, 3, 5, ["pull-australian-pullup"]),
    ("pull-full-pullup", "Full Pull-Up", "Pull", 6, 3, 3, ["pull-negative-pullup"]),
    ("legs-assisted-squat", "Assisted Squat", "Legs", 1, 3, 15, []),
    ("legs-bodyweight-squat", "Bodyweight Squat", "Legs", 2, 3, 15, ["legs-assisted-squat"]),
    ("legs-split-squat", "Split Squat", "Legs", 3, 3, 10, ["legs-bodyweight-squat"]),
    ("legs-lunge", "Bodyweight Lunge", "Legs", 4, 3, 10, ["legs-split-squat"]),
    ("legs-pistol-progression", "Pistol Squat Progression", "Legs", 5, 3, 5, ["legs-lunge"]),
    ("legs-jump-squat", "Jump Squat", "Legs", 6, 3, 10, ["legs-bodyweight-squat"]),
    ("core-dead-bug", "Dead Bug", "Core", 1, 3, 10, []),
    ("core-plank", "Plank", "Core", 2, 3, 30, ["core-dead-bug"]),
    ("core-side-plank", "Side Plank", "Core", 3, 3, 20, ["core-plank"]),
    ("core-hollow-hold", "Hollow Body Hold", "Core", 4, 3, 20, ["core-plank"]),
    ("core-l-sit-progression", "L-Sit Progression", "Core", 5, 3, 10, ["core-hollow-hold"]),
    ("core-dragon-flag-progression", "Dragon Flag Progression", "Core", 6, 3, 5, ["core-hollow-hold"]),
    ("push-wide-pushup", "Wide Push-Up", "Push", 2, 3, 10, ["push-elevated-pushup"]),
    ("pull-band-pull-apart", "Band Pull Apart", "Pull", 1, 3, 15, []),
    ("pull-seated-row", "Seated Row with Band", "Pull", 2, 3, 12, ["pull-wall-angel"]),
    ("legs-calf-raise", "Standing Calf Raise", "Legs", 1, 3, 20, []),
    ("legs-glute-bridge", "Glute Bridge", "Legs", 2, 3, 15, ["legs-assisted-squat"]),
    ("core-bird-dog", "Bird Dog", "Core", 1, 3, 10, []),
    ("core-mountain-climber", "Mountain Climber", "Core", 2, 3, 20, ["core-dead-bug"]),
]

# Admin screens describe requirements as free text, e.g. "3 sets of 10 reps".
REQUIREMENT_PATTERN = re.compile(r"(\d+)\s*sets?\s*of\s*(\d+)\s*reps?", re.IGNORECASE)
DEFAULT_REQUIREMENT = (3, 10)


def parse_requirement_text(text):
    """Turns "3 sets of 10 reps" into a Requirement, falling back to 3x10."""
    sets, reps = DEFAULT_REQUIREMENT
    match = REQUIREMENT_PATTERN.search(text or "")
    if match:
        sets, reps = int(match.group(1)), int(match.group(2))
    return Requirement(sets=sets, reps=reps, description=text or "")


def build_default_catalog():
    skills = []
    for skill_id, title, category, level, sets, reps, prereqs in DEFAULT_SKILLS:
        skills.append(
            Skill(
                id=skill_id,
                title=title,
                category=category,
                level=level,
                requirement=Requirement(
                    sets=sets, reps=reps, description=f"Complete {sets} sets of {reps} reps"
                ),
                prerequisites=tuple(prereqs),
            )
        )
    return SkillCatalog(skills)


if __name__ == "__main__":
    catalog = build_default_catalog()

    target = "push-decline-pushup"
    print(f"Learning path for '{target}':")
    print(" -> ".join(catalog.get_learning_path(target)))
