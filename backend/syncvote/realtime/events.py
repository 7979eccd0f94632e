ROOM_SUBSCRIBE = "room:subscribe"
ROOM_UNSUBSCRIBE = "room:unsubscribe"
ROOM_STATE = "room:state"
ROOM_RESULTS = "room:results"
ROOM_ERROR = "room:error"

VOTING_TICK = "voting:tick"
VOTING_ENDED = "voting:ended"
