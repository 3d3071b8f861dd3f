"""SystemInfo-to-profile matching logic."""

from __future__ import annotations

from kasactl.core.model import DeviceProfile, SystemInfo


def profile_matches(info: SystemInfo, profile: DeviceProfile) -> bool:
    fields = info.raw
    rules = profile.match
    if not all(name in fields for name in rules.all_of):
        return False
    if rules.any_of and not any(name in fields for name in rules.any_of):
        return False
    return not any(name in fields for name in rules.none_of)


def match_score(info: SystemInfo, profile: DeviceProfile) -> int:
    """Score a matching profile by how many constraints it pinned down."""
    if not profile_matches(info, profile):
        return 0
    rules = profile.match
    return 1 + len(rules.all_of) + len(rules.none_of) + (1 if rules.any_of else 0)


def best_profile_for_info(info: SystemInfo, profiles: dict[str, DeviceProfile]) -> DeviceProfile | None:
    best: DeviceProfile | None = None
    best_score = 0
    for profile_id in sorted(profiles):
        profile = profiles[profile_id]
        score = match_score(info, profile)
        if score > best_score:
            best = profile
            best_score = score
    return best
