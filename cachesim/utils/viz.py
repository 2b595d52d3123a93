import plotly.express as px
import pandas as pd

def export_hit_rate_chart(history, path: str):
    if not history:
        with open(path, "w") as f:
            f.write("<h1>Hit Rate</h1><p>No data to display.</p>")
        return

    df = pd.DataFrame(history, columns=["accesses", "hit_rate"])
    # Ensure numeric types, coercing errors
    df['accesses'] = pd.to_numeric(df['accesses'], errors='coerce')
    df['hit_rate'] = pd.to_numeric(df['hit_rate'], errors='coerce')
    df = df.dropna(subset=['accesses', 'hit_rate'])
    df['hit_rate_pct'] = df['hit_rate'] * 100.0

    fig = px.line(
        df,
        x="accesses",
        y="hit_rate_pct",
        markers=True,
        title="Cache Simulation (Cumulative Hit Rate)",
        labels={"accesses": "Accesses", "hit_rate_pct": "Hit Rate (%)"}
    )
    fig.update_yaxes(range=[0, 100])
    fig.update_layout(font=dict(family="Courier New, monospace", size=12))

    fig.write_html(path, include_plotlyjs="cdn", full_html=True)

def export_set_histogram_ascii(set_hits, set_misses, max_rows: int = 32):
    if not set_misses:
        return "No sets to display."

    total_misses = sum(set_misses)
    if total_misses == 0 and sum(set_hits) == 0:
        return "No accesses recorded."

    num_sets = len(set_misses)
    # Group neighbouring sets into buckets so large caches still fit on screen
    bucket = -(-num_sets // max_rows)
    rows = []
    for start in range(0, num_sets, bucket):
        end = min(start + bucket, num_sets)
        rows.append((start, end, sum(set_hits[start:end]), sum(set_misses[start:end])))

    widest = max(hits + misses for _, _, hits, misses in rows)
    scale = 60.0 / widest if widest > 0 else 0 # Scale to 60 characters width

    chart = "Per-Set Accesses (ASCII Histogram, '#' = miss, '.' = hit)\n"
    chart += "" + ("-" * 80) + "\n"
    for start, end, hits, misses in rows:
        label = f"{start}" if end - start == 1 else f"{start}-{end - 1}"
        bar = "#" * int(misses * scale) + "." * int(hits * scale)
        chart += f"{label:>11} |{bar:<60} {misses}/{hits + misses}\n"
    chart += "" + ("-" * 80) + "\n"
    chart += f"{num_sets} sets, {total_misses} misses\n"

    return chart
