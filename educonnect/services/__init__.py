"""Domain services. Every function takes the acting ``Principal`` explicitly
and raises the errors from ``educonnect.errors``; none reads request state."""
