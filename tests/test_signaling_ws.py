"""
End-to-end tests over the WebSocket endpoint
============================================
Two clients pair through the real FastAPI app using TestClient sockets.
"""

ROOM_ID = "ABCD1234"


def join_message(role, room_id=ROOM_ID, client_id=None):
    message = {"type": "join-room", "roomId": room_id, "role": role}
    if client_id:
        message["clientId"] = client_id
    return message


def test_full_session(client, signaling_app):
    """Join, pair, offer/answer/candidate exchange, then disconnect cleanup"""
    registry = signaling_app.state.registry
    sdp_offer = {"type": "offer", "sdp": "v=0\r\ns=-\r\n"}
    sdp_answer = {"type": "answer", "sdp": "v=0\r\ns=-\r\n"}
    candidate = {"candidate": "candidate:0 1 UDP 2122252543 10.0.0.2 50000 typ host", "sdpMid": "0", "sdpMLineIndex": 0}

    with client.websocket_connect("/ws") as a:
        a.send_json(join_message("sender", client_id="android-1"))
        assert a.receive_json() == {"type": "room-joined", "roomId": ROOM_ID, "role": "sender", "success": True}

        with client.websocket_connect("/") as b:
            b.send_json(join_message("receiver", client_id="windows-1"))
            assert b.receive_json() == {"type": "room-joined", "roomId": ROOM_ID, "role": "receiver", "success": True}
            assert b.receive_json() == {"type": "peer-joined", "roomId": ROOM_ID, "peerRole": "android"}
            assert a.receive_json() == {"type": "peer-joined", "roomId": ROOM_ID, "peerRole": "windows"}

            a.send_json({"type": "offer", "sdp": sdp_offer})
            assert b.receive_json() == {"type": "offer", "roomId": ROOM_ID, "sdp": sdp_offer}

            b.send_json({"type": "answer", "sdp": sdp_answer})
            assert a.receive_json() == {"type": "answer", "roomId": ROOM_ID, "sdp": sdp_answer}

            a.send_json({"type": "ice-candidate", "candidate": candidate})
            assert b.receive_json() == {"type": "ice-candidate", "roomId": ROOM_ID, "candidate": candidate}

        assert a.receive_json() == {"type": "peer-disconnected", "roomId": ROOM_ID, "peerRole": "receiver"}
        assert registry.get(ROOM_ID).receiver is None

    assert ROOM_ID not in registry
    assert len(signaling_app.state.connections) == 0


def test_offer_before_receiver_is_not_reported(client):
    """The sender gets nothing back for an undeliverable offer"""
    with client.websocket_connect("/ws") as a:
        a.send_json(join_message("sender"))
        a.receive_json()

        a.send_json({"type": "offer", "sdp": {"type": "offer", "sdp": "v=0"}})
        a.send_json({"type": "ping"})

        # The next message is the reply to ping, so the offer produced nothing
        reply = a.receive_json()
        assert reply["type"] == "error"
        assert reply["message"] == "Unknown message type: ping"


def test_role_conflict_over_socket(client, signaling_app):
    with client.websocket_connect("/ws") as a:
        a.send_json(join_message("android"))
        assert a.receive_json()["role"] == "android"

        with client.websocket_connect("/ws") as b:
            b.send_json(join_message("sender"))
            reply = b.receive_json()
            assert reply["type"] == "error"
            assert reply["message"] == "Room already has an Android sender"

            # b is still usable and can take the free slot
            b.send_json(join_message("windows"))
            assert b.receive_json()["type"] == "room-joined"
            assert b.receive_json() == {"type": "peer-joined", "roomId": ROOM_ID, "peerRole": "android"}
            assert a.receive_json() == {"type": "peer-joined", "roomId": ROOM_ID, "peerRole": "windows"}

    assert signaling_app.state.stats.successful_pairs == 1
    assert signaling_app.state.stats.errors == 1


def test_rejoin_after_room_removed(client, signaling_app):
    """Once both peers leave, the same id starts from empty slots"""
    with client.websocket_connect("/ws") as a:
        a.send_json(join_message("receiver"))
        a.receive_json()

    assert ROOM_ID not in signaling_app.state.registry

    with client.websocket_connect("/ws") as b:
        b.send_json(join_message("receiver"))
        assert b.receive_json() == {"type": "room-joined", "roomId": ROOM_ID, "role": "receiver", "success": True}


def test_invalid_json_over_socket(client):
    with client.websocket_connect("/ws") as a:
        a.send_text("hello")
        reply = a.receive_json()
        assert reply == {"type": "error", "message": "Invalid message format", "timestamp": reply["timestamp"]}
