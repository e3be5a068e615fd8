import random


class SequenceRandom:
    """Random source replaying fixed uniform draws; codes stay random."""

    def __init__(self, *values):
        self.values = list(values)
        self._codes = random.Random(0)

    def random(self):
        return self.values.pop(0)

    def choices(self, population, k=1):
        return self._codes.choices(population, k=k)


def place(room, piece_id, position, safe=False):
    piece = room.game_state.find_piece(piece_id)
    piece.position = position
    piece.is_safe = safe
    return piece


def received(sio_client, name=None):
    events = sio_client.get_received('/ws')
    if name is None:
        return events
    return [e['args'][0] for e in events if e['name'] == name]
