from variation_tree import node_id
from variation_viewer import Playback, Session, cursor_view


def _play_through(session, playback, view):
    # Same loop as the background playback handler, minus the sleep.
    ticket = playback.start()
    synced = []
    while ticket is not None:
        ticket, moved = playback.tick(ticket)
        if moved:
            view.update(cursor_view(session))
            synced.append(session.cursor.san)
    return synced


def test_playback_syncs_the_final_move():
    session = Session()
    session.load_pgn("1. e4 e5 2. Nf3")
    session.go_start()
    view = cursor_view(session)

    synced = _play_through(session, Playback(session), view)

    assert synced == ["e4", "e5", "Nf3"]
    assert view["selected_id"] == node_id(session.cursor) == "n:0.0.0"
    assert view["fen"] == session.cursor.position
    assert view["status"] == "Turn: Black"
    assert view["can_go_forward"] is False
    assert view["can_go_back"] is True


def test_stale_tick_reports_no_move():
    session = Session()
    session.load_pgn("1. d4 d5")
    session.go_start()
    playback = Playback(session)
    ticket = playback.start()
    session.go_end()
    assert playback.tick(ticket) == (None, False)
    assert session.cursor.san == "d5"
