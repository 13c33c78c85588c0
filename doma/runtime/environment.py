"""Lexical scopes for Doma."""

import threading


class Environment:
    """A scope: bindings from names to Objects plus an optional enclosing scope. Closures keep a reference to the
    Environment they were created in, so an Environment lives as long as anything that refers to it.
    """

    def __init__(self, parent=None):
        self.bindings = {}
        self.parent = parent
        self._lock = threading.Lock()  # guards bindings if an embedding shares this scope between threads

    @classmethod
    def new_enclosed(cls, parent):
        """Returns a new, empty scope nested inside parent."""
        return cls(parent)

    def get(self, name):
        """Returns the innermost binding of name, walking outward through enclosing scopes. Returns None if name is not
        bound anywhere.
        """
        env = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.parent
        return None

    def set(self, name, value):
        """Binds name to value in this scope. Enclosing scopes are never modified."""
        with self._lock:
            self.bindings[name] = value
        return value

    def __contains__(self, name):
        return self.get(name) is not None

    def __repr__(self):
        depth = 0
        env = self.parent
        while env is not None:
            depth += 1
            env = env.parent
        return f"Environment(names={sorted(self.bindings)}, depth={depth})"
