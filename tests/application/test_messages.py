import threading

from winget_gui.application.messages import (
    MessageChannel,
    PackagesFailed,
    StatusUpdate,
)


def test_drain_returns_messages_oldest_first_and_empties_channel() -> None:
    channel = MessageChannel()
    channel.send(StatusUpdate("first"))
    channel.send(PackagesFailed(1, "second"))

    assert channel.drain() == [StatusUpdate("first"), PackagesFailed(1, "second")]
    assert channel.drain() == []


def test_send_from_other_threads() -> None:
    channel = MessageChannel()
    threads = [
        threading.Thread(target=channel.send, args=(StatusUpdate(str(i)),))
        for i in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(m.text for m in channel.drain()) == [str(i) for i in range(8)]
