"""
actionstore CLI

Commands:
- actionstore run MODULE CALL... - Execute action calls against a fresh store
- actionstore inspect MODULE - List actions and the initial state
- actionstore version
"""
