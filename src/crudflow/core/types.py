"""Core type definitions for crudflow."""

type Copy[T] = T
"""Type alias indicating a value is a copy that won't auto-persist.

When you see `Copy[T]` in a return type, the returned value is an independent
clone. Mutations to it do NOT affect the loaded entity or the repository. To
persist changes, edit the working copy and save it through the controller.
"""
