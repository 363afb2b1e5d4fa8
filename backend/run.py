from proof_bridge import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server so the proof narrative can stream over websockets in dev
    socketio.run(app, port=3000, debug=True)
