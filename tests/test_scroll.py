from chatsync.scroll import ScrollAnchor, Viewport, dynamic_threshold


def _viewport(distance: float) -> Viewport:
    return Viewport(scroll_top=1000 - 400 - distance, scroll_height=1000, client_height=400)


def test_distance_from_bottom():
    assert _viewport(0).distance_from_bottom == 0
    assert _viewport(250).distance_from_bottom == 250


def test_starts_at_bottom():
    assert ScrollAnchor().at_bottom


def test_scroll_events_recompute_anchor():
    anchor = ScrollAnchor(threshold=100)
    assert anchor.on_scroll(_viewport(100))
    assert not anchor.on_scroll(_viewport(101))
    assert not anchor.at_bottom


def test_new_content_autoscrolls_only_from_bottom():
    anchor = ScrollAnchor()
    anchor.begin_mutation()
    assert anchor.end_mutation(_viewport(300))
    assert anchor.at_bottom

    anchor.on_scroll(_viewport(500))
    anchor.begin_mutation()
    assert not anchor.end_mutation(_viewport(800))
    assert not anchor.at_bottom


def test_mutation_without_new_entries_does_not_scroll():
    anchor = ScrollAnchor()
    anchor.begin_mutation()
    assert not anchor.end_mutation(_viewport(0), has_new_entries=False)
    assert anchor.at_bottom


def test_jump_to_latest_forces_bottom():
    anchor = ScrollAnchor()
    anchor.on_scroll(_viewport(1000))
    anchor.jump_to_latest()
    assert anchor.at_bottom


def test_dynamic_threshold():
    assert dynamic_threshold(40, 40) == 200
    assert dynamic_threshold(180, 120) == 350
    anchor = ScrollAnchor()
    anchor.widen_for(180, 120)
    assert anchor.on_scroll(_viewport(340))
