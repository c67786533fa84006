"""Personal movie catalog API and client library."""
