"""
Updater service — Node.js / npm / Gemini CLI / Cloud SDK update pipeline.

Layers:

    L3 detection      read-only probes (versions, global packages)
    L4 execution      subprocess runner, CommandRunner, backup snapshot
    L5 orchestration  ordered UpdateSteps with failure policy
    L6 reporting      verification, smoke test, summary, retention
"""
