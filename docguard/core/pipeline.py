import os
import logging
from typing import Any, Callable, Dict, Optional, TextIO, TypedDict

from langgraph.graph import StateGraph, END

from docguard.schema import ApplyResult, TargetOutcome
from docguard.decision.commenter import Commenter
from .apply import ApplyProtocol, STREAM_TARGET
from .assembler import PromptAssembler
from .errors import DocGuardError, GenerationError, MissingInputError
from .renderer import PromptRenderer
from .sanitizer import FenceSanitizer

logger = logging.getLogger("docguard.pipeline")


class TargetState(TypedDict, total=False):
    # Inputs
    target: str
    source_path: str
    work_dir: str
    sink: Optional[TextIO]
    prompt_only: bool

    # Stage outputs, each fully materialized before the next stage runs
    source: bytes
    record_path: str
    prompt: str
    candidate: str
    validated: str
    result: ApplyResult

    # Outcome
    stage: str
    error: Optional[DocGuardError]


class TargetPipeline:
    """
    Read -> Assemble -> Render -> Generate -> Sanitize -> Apply for one target.

    Each node turns a DocGuardError into state and the router ends the run there,
    so a rejected candidate never reaches the apply node and the original file is
    never backed up or touched.
    """
    def __init__(self, policy: str, template_path: str, commenter: Optional[Commenter],
                 assembler: Optional[PromptAssembler] = None,
                 renderer: Optional[PromptRenderer] = None,
                 applier: Optional[ApplyProtocol] = None):
        self.policy = policy
        self.template_path = template_path
        self.commenter = commenter
        self.assembler = assembler or PromptAssembler()
        self.renderer = renderer or PromptRenderer()
        self.applier = applier or ApplyProtocol()
        self.app = self._build_graph()

    def _build_graph(self):
        workflow = StateGraph(TargetState)
        workflow.add_node("read", self._guard("read", self._node_read))
        workflow.add_node("assemble", self._guard("assemble", self._node_assemble))
        workflow.add_node("render", self._guard("render", self._node_render))
        workflow.add_node("emit_prompt", self._guard("render", self._node_emit_prompt))
        workflow.add_node("generate", self._guard("generate", self._node_generate))
        workflow.add_node("sanitize", self._guard("sanitize", self._node_sanitize))
        workflow.add_node("apply", self._guard("apply", self._node_apply))

        workflow.set_entry_point("read")

        def advance_to(next_node: str) -> Callable[[TargetState], str]:
            def router(state: TargetState) -> str:
                if state.get("error") is not None:
                    return END
                return next_node
            return router

        for current, nxt in [("read", "assemble"), ("assemble", "render"), ("generate", "sanitize"), ("sanitize", "apply")]:
            workflow.add_conditional_edges(current, advance_to(nxt), {nxt: nxt, END: END})

        def after_render(state: TargetState) -> str:
            if state.get("error") is not None:
                return END
            return "emit_prompt" if state.get("prompt_only") else "generate"

        workflow.add_conditional_edges("render", after_render, {"emit_prompt": "emit_prompt", "generate": "generate", END: END})
        workflow.add_edge("emit_prompt", END)
        workflow.add_edge("apply", END)

        return workflow.compile()

    @staticmethod
    def _guard(stage: str, node: Callable[[TargetState], Dict[str, Any]]) -> Callable[[TargetState], Dict[str, Any]]:
        def guarded(state: TargetState) -> Dict[str, Any]:
            try:
                update = node(state)
            except DocGuardError as e:
                if e.target is None:
                    e.target = state["target"]
                logger.info(f"{state['target']}: {stage} failed: {e}")
                return {"error": e, "stage": stage}
            update["stage"] = stage
            return update
        return guarded

    # --- Nodes ---

    def _node_read(self, state: TargetState) -> Dict[str, Any]:
        try:
            with open(state["source_path"], "rb") as f:
                source = f.read()
        except OSError as e:
            raise MissingInputError(f"Source unreadable: {e.strerror or e}")
        return {"source": source}

    def _node_assemble(self, state: TargetState) -> Dict[str, Any]:
        record = self.assembler.assemble(self.policy, state["source"], state["target"])
        record_path = PromptAssembler.write_record(record, os.path.join(state["work_dir"], "data.json"))
        return {"record_path": record_path}

    def _node_render(self, state: TargetState) -> Dict[str, Any]:
        return {"prompt": self.renderer.render(self.template_path, state["record_path"])}

    def _node_emit_prompt(self, state: TargetState) -> Dict[str, Any]:
        result = self.applier.apply_stream(state["sink"], state["prompt"])
        return {"result": result}

    def _node_generate(self, state: TargetState) -> Dict[str, Any]:
        return {"candidate": self.commenter.comment(state["prompt"], target=state["target"])}

    def _node_sanitize(self, state: TargetState) -> Dict[str, Any]:
        validated = FenceSanitizer(target=state["target"]).sanitize(state["candidate"])
        # A lone fence (or only blank lines) sanitizes to nothing; never write that over a file
        # unless the file itself was blank.
        if not validated.strip() and state["source"].strip():
            raise GenerationError("Generation service returned no file content")
        return {"validated": validated}

    def _node_apply(self, state: TargetState) -> Dict[str, Any]:
        if state["target"] == STREAM_TARGET:
            result = self.applier.apply_stream(state["sink"], state["validated"])
        else:
            result = self.applier.apply_file(state["target"], state["validated"])
        return {"result": result}

    # --- Entry point ---

    def run(self, target: str, source_path: str, work_dir: str,
            sink: Optional[TextIO] = None, prompt_only: bool = False) -> TargetOutcome:
        final = self.app.invoke({
            "target": target,
            "source_path": source_path,
            "work_dir": work_dir,
            "sink": sink,
            "prompt_only": prompt_only,
            "error": None
        })

        error = final.get("error")
        if error is not None:
            return TargetOutcome(
                target=target,
                ok=False,
                stage=final.get("stage", error.stage),
                error=str(error),
                backup_path=getattr(error, "backup_path", None)
            )
        return TargetOutcome(target=target, ok=True, stage=final.get("stage", "apply"), result=final.get("result"))
