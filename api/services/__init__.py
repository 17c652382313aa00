"""Business operations shared by the HTTP routes and the background triggers."""
