"""Domain layer for the classroom attention tracker."""
