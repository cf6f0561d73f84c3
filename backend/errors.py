class SeatingError(Exception):
    """Base class for errors that stop a seating run."""


class MissingInputError(SeatingError):
    pass


class CapacityOverflowError(SeatingError):
    def __init__(self, room_no, assigned, capacity):
        self.room_no = room_no
        self.assigned = assigned
        self.capacity = capacity
        super().__init__(
            f"Room {room_no} has {assigned} students but capacity is only {capacity}"
        )


class UploadError(SeatingError):
    pass


class DuplicateRoomError(SeatingError):
    def __init__(self, room_no):
        self.room_no = room_no
        super().__init__(f"Room {room_no} is listed more than once")
