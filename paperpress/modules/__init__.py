"""Receipt content: the weather forecast and the pieces it is composed from."""
