from __future__ import annotations
from level_core.interview import PlacementInterview, STATEMENT_ANSWERS, DAILY_GOALS
from level_core.evaluator import UnavailableCapture
from level_core.level_store import InMemoryLevelStore, read_level
from level_core.types import SELF_REPORT_TIERS
def ask(prompt: str, options=None) -> str:
    if options:
        print(prompt)
        for i,opt in enumerate(options): print(f"  [{i}] {opt}")
        while True:
            v = input("Your choice (index): ").strip()
            if v.isdigit() and int(v) < len(options): return options[int(v)]
            print("Enter a number index.")
    else:
        return input(prompt + " ").strip()
def ask_many(prompt: str, options) -> list[str]:
    print(prompt)
    for i,opt in enumerate(options): print(f"  [{i}] {opt}")
    raw = input("Indexes, comma separated (blank for none): ").strip()
    return [options[int(x)] for x in raw.split(",") if x.strip().isdigit() and int(x) < len(options)]
def _answer_step(sess: PlacementInterview) -> None:
    step = sess.current
    if step.kind == "language": sess.answer(ask("Language code (e.g. en):") or "en")
    elif step.kind == "why": sess.answer(ask_many("Why are you learning English?", ["work","job","service","imm","study","etc"]))
    elif step.kind == "occupation": sess.answer({"category": ask("Occupation category:"), "job": ask("Job title:")})
    elif step.kind == "tier": sess.answer(ask("How comfortable are you speaking English?", list(SELF_REPORT_TIERS)))
    elif step.kind == "statement":
        st = sess.content.get_statements()[step.index]
        sess.answer(ask(f"Does this apply to you? \"{st.text}\"", list(STATEMENT_ANSWERS)))
    elif step.kind == "lexical": sess.answer(ask_many(f"Pick the {step.tier}-level words you know:", sess.content.get_vocabulary(step.tier)))
    elif step.kind == "goal": sess.answer(ask("Daily goal (minutes):", list(DAILY_GOALS)))
    elif step.kind == "notification": sess.answer(ask("Enable reminders? (y/n)").lower().startswith("y"))
    elif step.kind == "listening":
        print("Put the words back in order:", " | ".join(sess.presented_tokens()))
        sess.answer(ask("Type the sentence, words separated by spaces:").split())
    elif step.kind == "speaking":
        item = sess.content.get_speaking_item(step.index)
        print(f"Say this sentence: \"{item.sentence}\"")
        attempt = sess.record_speech(UnavailableCapture())
        if not attempt.capability_available: print("(no microphone here; counted as done)")
def main():
    print("WorkSpeak placement")
    store = InMemoryLevelStore()
    sess = PlacementInterview()
    while not sess.is_complete:
        _answer_step(sess)
        if not sess.advance(): print("An answer is required to continue.")
    outcome = sess.finalize()
    store.set_level("cli", outcome.level)
    print(f"Band {outcome.band} -> {outcome.final_band} (listening={'ok' if outcome.listen_correct else 'miss'})")
    print(f"Done. Your starting level: L{read_level(store, 'cli')}")
if __name__ == "__main__": main()
