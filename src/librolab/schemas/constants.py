# Id carried by entities that have not been stored yet.
UNPERSISTED_ID = -1

MIN_RATING = 1
MAX_RATING = 5
