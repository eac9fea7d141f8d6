import os

_STATE_LABELS = {
    "loading": "LOADING",
    "ready": "READY",
    "exhausted": "END",
    "closed": "",
}


def render_status(context, width):
    """
    context keys: status_msg, file_path, state, top_row, bottom_row,
                  total_rows, exact
    """
    if context.get("status_msg"):
        text = f" {context['status_msg']}"
    else:
        fname = context.get("file_path") or ""
        if fname:
            fname = os.path.basename(fname)
        top_row = context.get("top_row", 0)
        bottom_row = context.get("bottom_row", top_row)
        total_rows = context.get("total_rows", 0)
        total = f"{total_rows}" if context.get("exact") else f"{total_rows}+"
        if bottom_row > top_row:
            rows_info = f"rows {top_row + 1}-{bottom_row} of {total}"
        else:
            rows_info = f"rows 0 of {total}"
        mode = _STATE_LABELS.get(context.get("state", "loading"), "")
        text = f" pcsv | {fname} | {rows_info} | {mode} | q:quit"

    return text.ljust(width)[:width]
