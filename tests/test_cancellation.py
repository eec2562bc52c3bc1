import threading

import pytest

from vidsift.cancellation import CancellationToken, OperationCancelled


class TestCancellationToken:
    def test_starts_uncancelled(self):
        token = CancellationToken()

        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel_is_sticky(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()

        assert token.cancelled
        with pytest.raises(OperationCancelled):
            token.raise_if_cancelled()

    def test_cancel_from_another_thread(self):
        token = CancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join()

        assert token.cancelled
