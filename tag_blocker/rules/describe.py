from tag_blocker.models import PLACEMENT_LABELS, Placement, Rule


def describe_depth(rule: Rule) -> str:
    if rule.min_depth is not None and rule.max_depth is not None:
        return f"depth {rule.min_depth}-{rule.max_depth}"
    if rule.min_depth is not None:
        return f"depth >={rule.min_depth}"
    if rule.max_depth is not None:
        return f"depth <={rule.max_depth}"
    return ""


def describe_placement(placement: set[Placement]) -> str:
    return "/".join(PLACEMENT_LABELS[item] for item in sorted(placement))


def describe_rule(rule: Rule) -> str:
    if rule.is_regex:
        preview = f"regex: {rule.regex_pattern} -> {rule.replacement or '(remove)'}"
    else:
        preview = f"{rule.start_tag}...{rule.end_tag}"

    restrictions: list[str] = []
    depth = describe_depth(rule)
    if depth:
        restrictions.append(depth)
    if rule.markdown_only:
        restrictions.append("markdown only")
    if rule.prompt_only:
        restrictions.append("prompt only")
    if rule.placement:
        restrictions.append(describe_placement(rule.placement))

    if restrictions:
        preview += f" [{', '.join(restrictions)}]"
    return preview
