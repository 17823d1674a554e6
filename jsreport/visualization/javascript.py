# jsreport/visualization/javascript.py
"""
JavaScript emitted once per page and shared by every chart on it.

Charts call these helpers from their own closures: dataset loading, date
sniffing, filtering with observation counts, axis transforms, smoothing,
kernel densities, and a small expression language for derived axes.
"""

JS_UTILITIES = r"""
// ---------------------------------------------------------------- loading
function waitForParquet() {
    return new Promise(function(resolve) {
        if (window.parquetReady) { resolve(); return; }
        var timer = setInterval(function() {
            if (window.parquetReady) { clearInterval(timer); resolve(); }
        }, 50);
    });
}

var DATE_RE = /^\d{4}-\d{2}-\d{2}$/;
var DATETIME_RE = /^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}/;
var TIME_RE = /^\d{2}:\d{2}:\d{2}(\.\d+)?$/;
var MIN_TIMESTAMP_MS = 946684800000;   // 2000-01-01
var MAX_TIMESTAMP_MS = 4102444800000;  // 2100-01-01

// columns holding milliseconds since midnight, filled by parseDatesInData
var TIME_COLUMNS = {};

function timeStringToMs(s) {
    var parts = s.split(':');
    var seconds = parseFloat(parts[2]);
    return (parseInt(parts[0], 10) * 3600 + parseInt(parts[1], 10) * 60) * 1000 + Math.round(seconds * 1000);
}

function parseDatesInData(data) {
    if (!data || data.length === 0) return data;
    var sample = data.slice(0, Math.min(10, data.length));
    var kinds = {};
    Object.keys(data[0]).forEach(function(key) {
        var counts = {nonNull: 0, alreadyDate: 0, stringDate: 0, time: 0, timestamp: 0};
        sample.forEach(function(row) {
            var v = row[key];
            if (v === null || v === undefined || v === '') return;
            counts.nonNull++;
            if (v instanceof Date) {
                counts.alreadyDate++;
            } else if (typeof v === 'string') {
                if (DATE_RE.test(v) || DATETIME_RE.test(v)) counts.stringDate++;
                else if (TIME_RE.test(v)) counts.time++;
            } else if (typeof v === 'number') {
                // day counts are too easily confused with plain integers
                if (v > 50000 && v >= MIN_TIMESTAMP_MS && v <= MAX_TIMESTAMP_MS) counts.timestamp++;
            }
        });
        if (counts.nonNull === 0) return;
        var half = counts.nonNull * 0.5;
        if (counts.alreadyDate > half) kinds[key] = 'alreadyDate';
        else if (counts.stringDate > half) kinds[key] = 'stringDate';
        else if (counts.time > half) { kinds[key] = 'time'; TIME_COLUMNS[key] = true; }
        else if (counts.timestamp > half) kinds[key] = 'timestamp';
    });
    var keys = Object.keys(kinds).filter(function(k) { return kinds[k] !== 'alreadyDate'; });
    if (keys.length === 0) return data;
    return data.map(function(row) {
        var out = Object.assign({}, row);
        keys.forEach(function(key) {
            var v = row[key];
            if (v === null || v === undefined || v === '') return;
            if (kinds[key] === 'stringDate' && typeof v === 'string') {
                var d = DATE_RE.test(v) ? new Date(v + 'T00:00:00Z') : new Date(v.endsWith('Z') ? v : v + 'Z');
                if (!isNaN(d.getTime())) out[key] = d;
            } else if (kinds[key] === 'time' && typeof v === 'string') {
                out[key] = timeStringToMs(v);
            } else if (kinds[key] === 'timestamp' && typeof v === 'number') {
                out[key] = new Date(v);
            }
        });
        return out;
    });
}

function pad2(n) { return (n < 10 ? '0' : '') + n; }

function temporalValueToString(value, column) {
    if (value instanceof Date) {
        var day = value.getUTCFullYear() + '-' + pad2(value.getUTCMonth() + 1) + '-' + pad2(value.getUTCDate());
        if (value.getUTCHours() === 0 && value.getUTCMinutes() === 0 && value.getUTCSeconds() === 0) return day;
        return day + 'T' + pad2(value.getUTCHours()) + ':' + pad2(value.getUTCMinutes()) + ':' + pad2(value.getUTCSeconds());
    }
    if (typeof value === 'number' && value >= 0 && value < 86400000 && column && TIME_COLUMNS[column]) {
        var ms = Math.round(value % 1000);
        var totalSeconds = Math.floor(value / 1000);
        var text = pad2(Math.floor(totalSeconds / 3600)) + ':' + pad2(Math.floor(totalSeconds / 60) % 60) + ':' + pad2(totalSeconds % 60);
        if (ms !== 0) text += '.' + String(ms).padStart(3, '0');
        return text;
    }
    return String(value);
}

function loadDataset(label) {
    return new Promise(function(resolve, reject) {
        var id = 'data_' + String(label).replace(/[\s\-\.:/\\]/g, '_');
        var el = document.getElementById(id);
        if (!el) { reject(new Error('Dataset not found: ' + label)); return; }
        var format = el.getAttribute('data-format');
        var src = el.getAttribute('data-src');
        var parseCsv = function(text) {
            var result = Papa.parse(text, {header: true, dynamicTyping: true, skipEmptyLines: true});
            var errors = result.errors.filter(function(e) { return e.type !== 'Delimiter'; });
            if (errors.length > 0) console.warn('CSV parse warnings for ' + label + ':', errors);
            return result.data;
        };
        var done = function(rows) { resolve(parseDatesInData(rows)); };
        try {
            if (format === 'json_external') {
                fetch(src).then(function(r) {
                    if (!r.ok) throw new Error('Failed to load ' + src + ': ' + r.status);
                    return r.json();
                }).then(done).catch(reject);
            } else if (format === 'parquet') {
                waitForParquet().then(function() {
                    return fetch(src);
                }).then(function(r) {
                    if (!r.ok) throw new Error('Failed to load ' + src + ': ' + r.status);
                    return r.arrayBuffer();
                }).then(function(buffer) {
                    var wasmTable = window.parquetWasm.readParquet(new Uint8Array(buffer));
                    var table = window.Arrow.tableFromIPC(wasmTable.intoIPCStream());
                    var rows = table.toArray().map(function(row) {
                        var obj = row.toJSON();
                        Object.keys(obj).forEach(function(k) {
                            if (typeof obj[k] === 'bigint') obj[k] = Number(obj[k]);
                        });
                        return obj;
                    });
                    done(rows);
                }).catch(reject);
            } else if (format === 'csv_external') {
                fetch(src).then(function(r) {
                    if (!r.ok) throw new Error('Failed to load ' + src + ': ' + r.status);
                    return r.text();
                }).then(function(text) { done(parseCsv(text)); }).catch(reject);
            } else if (format === 'json_embedded') {
                done(JSON.parse(el.textContent));
            } else if (format === 'csv_embedded') {
                done(parseCsv(el.textContent.trim()));
            } else {
                reject(new Error('Unknown data format: ' + format));
            }
        } catch (err) {
            reject(err);
        }
    });
}

// -------------------------------------------------------------- filtering
function setText(id, text) {
    var el = document.getElementById(id);
    if (el) el.textContent = text;
}

function remainingText(count, total) {
    var pct = total > 0 ? (100 * count / total).toFixed(1) : '0.0';
    return pct + '% (' + count + ') remaining';
}

function applyFiltersWithCounting(allData, chartTitle, categoricalFilters, continuousFilters,
                                  filters, rangeFilters, choiceFilters, choices) {
    var total = allData.length;
    setText(chartTitle + '_total_obs', total + ' observations');
    var rows = allData;
    (choiceFilters || []).forEach(function(col) {
        var wanted = choices[col];
        if (wanted === undefined || wanted === null) return;
        rows = rows.filter(function(row) { return temporalValueToString(row[col], col) === String(wanted); });
    });
    (categoricalFilters || []).forEach(function(col) {
        var selected = filters[col];
        if (!selected) return;
        rows = rows.filter(function(row) { return selected.includes(temporalValueToString(row[col], col)); });
        setText(col + '_select_' + chartTitle + '_obs_count', remainingText(rows.length, total));
    });
    (continuousFilters || []).forEach(function(col) {
        var range = rangeFilters[col];
        if (!range) return;
        rows = rows.filter(function(row) {
            var v = row[col];
            if (v === null || v === undefined) return false;
            v = (v instanceof Date) ? v.getTime() : parseFloat(v);
            return !isNaN(v) && v >= range.min && v <= range.max;
        });
        setText(col + '_range_' + chartTitle + '_obs_count', remainingText(rows.length, total));
    });
    return rows;
}

function readSelectValues(id) {
    var el = document.getElementById(id);
    if (!el) return null;
    return Array.from(el.selectedOptions).map(function(o) { return o.value; });
}

function readSelectValue(id, fallback) {
    var el = document.getElementById(id);
    return el ? el.value : fallback;
}

function readSliderRange(id) {
    var el = $('#' + id + '_slider');
    if (!el.length || !el.slider('instance')) return null;
    var values = el.slider('values');
    return {min: values[0], max: values[1]};
}

// ---------------------------------------------------------- axis transforms
function finiteValues(values) {
    return values.filter(function(v) { return typeof v === 'number' && isFinite(v); });
}

function meanAndStd(values) {
    var valid = finiteValues(values);
    if (valid.length === 0) return {mean: 0, std: 0};
    var mean = valid.reduce(function(a, b) { return a + b; }, 0) / valid.length;
    var variance = valid.reduce(function(a, b) { return a + (b - mean) * (b - mean); }, 0) / valid.length;
    return {mean: mean, std: Math.sqrt(variance)};
}

function computeQuantileTransform(values) {
    var indexed = [];
    values.forEach(function(v, i) {
        if (typeof v === 'number' && isFinite(v)) indexed.push({v: v, i: i});
    });
    var result = values.map(function() { return NaN; });
    var n = indexed.length;
    if (n === 0) return result;
    indexed.sort(function(a, b) { return a.v - b.v; });
    indexed.forEach(function(item, rank) {
        result[item.i] = n === 1 ? 0.5 : rank / (n - 1);
    });
    return result;
}

function applyAxisTransform(values, type) {
    if (!type || type === 'identity' || type === 'cumulative' || type === 'cumprod') return values;
    if (type === 'log') {
        return values.map(function(v) { return v > 0 ? Math.log(v) : NaN; });
    }
    if (type === 'z_score') {
        var s = meanAndStd(values);
        if (s.std === 0) return values;
        return values.map(function(v) { return (v - s.mean) / s.std; });
    }
    if (type === 'quantile') return computeQuantileTransform(values);
    if (type === 'inverse_cdf') {
        var t = meanAndStd(values);
        if (t.std === 0) return values.map(function() { return 0.5; });
        return values.map(function(v) { return normalCDF((v - t.mean) / t.std); });
    }
    return values;
}

function computeCumulativeSum(values) {
    var total = 0;
    return values.map(function(v) {
        if (typeof v === 'number' && isFinite(v)) total += v;
        return total;
    });
}

function computeCumulativeProduct(values) {
    var product = 1;
    return values.map(function(v) {
        if (typeof v === 'number' && isFinite(v)) product *= (1 + v);
        return product - 1;
    });
}

function computeEWMA(values, weight) {
    var result = [];
    var avg = null;
    values.forEach(function(v, i) {
        if (typeof v !== 'number' || !isFinite(v)) { result.push(avg === null ? NaN : avg); return; }
        var wt = Math.max(1 / (i + 1), weight);
        avg = (avg === null) ? v : wt * v + (1 - wt) * avg;
        result.push(avg);
    });
    return result;
}

function computeEWMSTD(values, weight) {
    var result = [];
    var m1 = null, m2 = null;
    values.forEach(function(v, i) {
        if (typeof v !== 'number' || !isFinite(v)) { result.push(m1 === null ? NaN : Math.sqrt(Math.max(0, m2 - m1 * m1))); return; }
        if (m1 === null) {
            m1 = v; m2 = v * v;
            result.push(0);
            return;
        }
        var wt = Math.max(1 / (i + 1), weight);
        m1 = wt * v + (1 - wt) * m1;
        m2 = wt * v * v + (1 - wt) * m2;
        result.push(Math.sqrt(Math.max(0, m2 - m1 * m1)));
    });
    return result;
}

function computeSMA(values, window) {
    var w = Math.max(1, Math.floor(window));
    return values.map(function(v, i) {
        var slice = finiteValues(values.slice(Math.max(0, i - w + 1), i + 1));
        if (slice.length === 0) return NaN;
        return slice.reduce(function(a, b) { return a + b; }, 0) / slice.length;
    });
}

function computeWindowAggregation(values, aggregation) {
    var valid = finiteValues(values);
    var n = valid.length;
    if (n === 0) return NaN;
    var mean = valid.reduce(function(a, b) { return a + b; }, 0) / n;
    if (aggregation === 'mean') return mean;
    if (aggregation === 'std') {
        if (n < 2) return 0;
        var ss = valid.reduce(function(a, b) { return a + (b - mean) * (b - mean); }, 0);
        return Math.sqrt(ss / (n - 1));
    }
    var m2 = 0, m3 = 0, m4 = 0;
    valid.forEach(function(v) {
        var d = v - mean;
        m2 += d * d; m3 += d * d * d; m4 += d * d * d * d;
    });
    m2 /= n; m3 /= n; m4 /= n;
    if (m2 === 0) return 0;
    if (aggregation === 'skewness') return m3 / Math.pow(m2, 1.5);
    if (aggregation === 'kurtosis') return m4 / (m2 * m2) - 3;
    return NaN;
}

function computeEWMStatistic(values, alpha, aggregation) {
    var result = [];
    var ewmMean = null, ewmVar = 0;
    values.forEach(function(v) {
        if (typeof v !== 'number' || !isFinite(v)) {
            result.push(ewmMean === null ? NaN : (aggregation === 'mean' ? ewmMean : Math.sqrt(ewmVar)));
            return;
        }
        if (ewmMean === null) {
            ewmMean = v;
            ewmVar = 0;
        } else {
            var delta = v - ewmMean;
            ewmMean = ewmMean + alpha * delta;
            var delta2 = v - ewmMean;
            ewmVar = (1 - alpha) * (ewmVar + alpha * delta * delta2);
        }
        result.push(aggregation === 'mean' ? ewmMean : Math.sqrt(ewmVar));
    });
    return result;
}

function computeMovingStatistic(values, windowType, aggregation, parameter) {
    if (windowType === 'exponential_decay') {
        var alpha = Math.min(1, Math.max(1e-6, parameter));
        if (aggregation === 'mean' || aggregation === 'std') return computeEWMStatistic(values, alpha, aggregation);
        // higher moments fall back to a trailing window of comparable span
        parameter = Math.max(2, Math.round(2 / alpha - 1));
        windowType = 'fixed_interval';
    }
    var w = Math.max(1, Math.floor(parameter));
    return values.map(function(v, i) {
        var lo, hi;
        if (windowType === 'fixed_interval_around') {
            var half = Math.floor(w / 2);
            lo = Math.max(0, i - half);
            hi = Math.min(values.length, i + half + 1);
        } else {
            lo = Math.max(0, i - w + 1);
            hi = i + 1;
        }
        return computeWindowAggregation(values.slice(lo, hi), aggregation);
    });
}

function normalCDF(x) {
    var t = 1 / (1 + 0.2316419 * Math.abs(x));
    var d = 0.3989423 * Math.exp(-x * x / 2);
    var p = d * t * (0.3193815 + t * (-0.3565638 + t * (1.781478 + t * (-1.821256 + t * 1.330274))));
    return x > 0 ? 1 - p : p;
}

function inverseNormalCDF(p) {
    if (!(p > 0 && p < 1)) return NaN;
    var a = [-3.969683028665376e+01, 2.209460984245205e+02, -2.759285104469687e+02,
             1.383577518672690e+02, -3.066479806614716e+01, 2.506628277459239e+00];
    var b = [-5.447609879822406e+01, 1.615858368580409e+02, -1.556989798598866e+02,
             6.680131188771972e+01, -1.328068155288572e+01];
    var c = [-7.784894002430293e-03, -3.223964580411365e-01, -2.400758277161838e+00,
             -2.549732539343734e+00, 4.374664141464968e+00, 2.938163982698783e+00];
    var d = [7.784695709041462e-03, 3.224671290700398e-01, 2.445134137142996e+00,
             3.754408661907416e+00];
    var pLow = 0.02425, pHigh = 1 - pLow, q, r;
    if (p < pLow) {
        q = Math.sqrt(-2 * Math.log(p));
        return (((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) /
               ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1);
    }
    if (p <= pHigh) {
        q = p - 0.5;
        r = q * q;
        return (((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5]) * q /
               (((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r + 1);
    }
    q = Math.sqrt(-2 * Math.log(1 - p));
    return -(((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) /
            ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1);
}

var AXIS_LABEL_FORMATS = {
    log: 'log', z_score: 'z', quantile: 'quantile', inverse_cdf: 'Φ',
    cumulative: 'cumulative', cumprod: 'cumprod', ewma: 'ewma', ewmstd: 'ewmstd', sma: 'sma'
};

function getAxisLabel(label, type) {
    var fn = AXIS_LABEL_FORMATS[type];
    return fn ? fn + '(' + label + ')' : label;
}

function applySeriesTransform(values, type, params) {
    params = params || {};
    if (type === 'cumulative') return computeCumulativeSum(values);
    if (type === 'cumprod') return computeCumulativeProduct(values);
    if (type === 'ewma') return computeEWMA(values, params.ewmaWeight || 0.1);
    if (type === 'ewmstd') return computeEWMSTD(values, params.ewmstdWeight || 0.1);
    if (type === 'sma') return computeSMA(values, params.smaWindow || 10);
    return applyAxisTransform(values, type);
}

// Transforms are computed over all rows so groups share one scale.
function groupTransformedPoints(rows, xCol, yCol, xTransform, yTransform, groupCol) {
    var xs = applyAxisTransform(rows.map(function(r) { return r[xCol]; }), xTransform);
    var ys = applyAxisTransform(rows.map(function(r) { return r[yCol]; }), yTransform);
    var groups = {};
    rows.forEach(function(row, i) {
        var key = groupCol ? temporalValueToString(row[groupCol], groupCol) : 'all';
        var g = groups[key] = groups[key] || {x: [], y: []};
        g.x.push(xs[i]);
        g.y.push(ys[i]);
    });
    return groups;
}

// ----------------------------------------------------------- distributions
function silvermanBandwidth(values) {
    var valid = finiteValues(values);
    if (valid.length < 2) return 1;
    var s = meanAndStd(valid);
    var bw = 1.06 * s.std * Math.pow(valid.length, -0.2);
    return bw > 0 ? bw : 1;
}

function computeKernelDensity(values, bandwidth, nPoints) {
    var valid = finiteValues(values);
    if (valid.length === 0) return {x: [], y: [], bandwidth: bandwidth || 1};
    var bw = bandwidth > 0 ? bandwidth : silvermanBandwidth(valid);
    var n = nPoints || 201;
    var lo = Math.min.apply(null, valid), hi = Math.max.apply(null, valid);
    var pad = (hi - lo) * 0.1 || bw;
    var start = lo - pad, step = (hi - lo + 2 * pad) / (n - 1);
    var norm = valid.length * bw * Math.sqrt(2 * Math.PI);
    var xs = [], ys = [];
    for (var i = 0; i < n; i++) {
        var x = start + i * step;
        var total = 0;
        for (var j = 0; j < valid.length; j++) {
            var u = (x - valid[j]) / bw;
            total += Math.exp(-0.5 * u * u);
        }
        xs.push(x);
        ys.push(total / norm);
    }
    return {x: xs, y: ys, bandwidth: bw};
}

function dominantEigenvector(m) {
    var v = [1, 1.1, 1.2], lambda = 0;
    for (var iter = 0; iter < 200; iter++) {
        var w = [0, 1, 2].map(function(r) { return m[r][0] * v[0] + m[r][1] * v[1] + m[r][2] * v[2]; });
        var len = Math.sqrt(w[0] * w[0] + w[1] * w[1] + w[2] * w[2]);
        if (len < 1e-12) break;
        v = w;
        for (var k = 0; k < 3; k++) v[k] /= len;
        lambda = len;
    }
    return {vector: normalize3(v), eigenvalue: lambda};
}

function normalize3(v) {
    var len = Math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2]);
    return len < 1e-12 ? null : [v[0] / len, v[1] / len, v[2] / len];
}

function cross3(a, b) {
    return [a[1] * b[2] - a[2] * b[1], a[2] * b[0] - a[0] * b[2], a[0] * b[1] - a[1] * b[0]];
}

function rayleigh3(m, v) {
    var total = 0;
    for (var a = 0; a < 3; a++) {
        for (var b = 0; b < 3; b++) total += v[a] * m[a][b] * v[b];
    }
    return total;
}

// Principal axes of a 3D point cloud: power iteration for the first two,
// the third completes an orthonormal basis.
function computePrincipalAxes3D(xs, ys, zs) {
    var pts = [];
    for (var i = 0; i < xs.length; i++) {
        var p = [xs[i], ys[i], zs[i]];
        if (p.every(function(v) { return typeof v === 'number' && isFinite(v); })) pts.push(p);
    }
    if (pts.length < 3) return null;
    var center = [0, 1, 2].map(function(k) {
        return pts.reduce(function(s, q) { return s + q[k]; }, 0) / pts.length;
    });
    var cov = [[0, 0, 0], [0, 0, 0], [0, 0, 0]];
    pts.forEach(function(q) {
        for (var a = 0; a < 3; a++) {
            for (var b = 0; b < 3; b++) cov[a][b] += (q[a] - center[a]) * (q[b] - center[b]) / pts.length;
        }
    });
    var first = dominantEigenvector(cov);
    var v1 = first.vector || [1, 0, 0];
    var deflated = cov.map(function(row, a) {
        return row.map(function(x, b) { return x - first.eigenvalue * v1[a] * v1[b]; });
    });
    var v2 = dominantEigenvector(deflated).vector;
    if (v2) {
        var d = v1[0] * v2[0] + v1[1] * v2[1] + v1[2] * v2[2];
        v2 = normalize3([v2[0] - d * v1[0], v2[1] - d * v1[1], v2[2] - d * v1[2]]);
    }
    v2 = v2 || normalize3(cross3(v1, Math.abs(v1[0]) < 0.9 ? [1, 0, 0] : [0, 1, 0]));
    var v3 = normalize3(cross3(v1, v2));
    var axes = [v1, v2, v3].map(function(v) { return {vector: v, eigenvalue: rayleigh3(cov, v)}; });
    var ranges = [0, 1, 2].map(function(k) {
        var col = pts.map(function(q) { return q[k]; });
        return Math.max.apply(null, col) - Math.min.apply(null, col);
    });
    return {center: center, axes: axes, scale: Math.min.apply(null, ranges) * 0.3};
}

// z matrix over the sorted distinct x and y values; missing cells are null.
function buildSurfaceGrid(rows, xCol, yCol, zCol) {
    var numeric = function(a, b) { return a - b; };
    var xSet = {}, ySet = {};
    rows.forEach(function(r) {
        if (typeof r[xCol] === 'number') xSet[r[xCol]] = r[xCol];
        if (typeof r[yCol] === 'number') ySet[r[yCol]] = r[yCol];
    });
    var xs = Object.keys(xSet).map(function(k) { return xSet[k]; }).sort(numeric);
    var ys = Object.keys(ySet).map(function(k) { return ySet[k]; }).sort(numeric);
    var z = ys.map(function() { return xs.map(function() { return null; }); });
    rows.forEach(function(r) {
        var xi = xs.indexOf(r[xCol]), yi = ys.indexOf(r[yCol]);
        if (xi >= 0 && yi >= 0 && typeof r[zCol] === 'number') z[yi][xi] = r[zCol];
    });
    return {x: xs, y: ys, z: z};
}

// ----------------------------------------------------- expression language
function tokenizeExpression(expr) {
    var tokens = [];
    var i = 0;
    while (i < expr.length) {
        var ch = expr[i];
        if (/\s/.test(ch)) { i++; continue; }
        if ('+-*/(),[]'.indexOf(ch) >= 0) {
            tokens.push({type: 'punct', value: ch});
            i++;
        } else if (/[0-9.]/.test(ch)) {
            var num = '';
            while (i < expr.length && /[0-9.eE]/.test(expr[i])) {
                if ((expr[i] === 'e' || expr[i] === 'E') && (expr[i + 1] === '-' || expr[i + 1] === '+')) {
                    num += expr[i] + expr[i + 1];
                    i += 2;
                    continue;
                }
                num += expr[i++];
            }
            tokens.push({type: 'number', value: parseFloat(num)});
        } else if (ch === ':') {
            var name = '';
            i++;
            while (i < expr.length && /[A-Za-z0-9_]/.test(expr[i])) name += expr[i++];
            tokens.push({type: 'variable', value: name});
        } else if (/[A-Za-z_]/.test(ch)) {
            var ident = '';
            while (i < expr.length && /[A-Za-z0-9_]/.test(expr[i])) ident += expr[i++];
            var j = i;
            while (j < expr.length && /\s/.test(expr[j])) j++;
            tokens.push({type: expr[j] === '(' ? 'function' : 'variable', value: ident});
        } else {
            throw new Error('Unexpected character "' + ch + '" in expression');
        }
    }
    return tokens;
}

function parseExpression(tokens) {
    var state = {tokens: tokens, pos: 0};
    var ast = parseAddSub(state, false);
    if (state.pos < tokens.length) throw new Error('Unexpected token ' + tokens[state.pos].value);
    return ast;
}

function peekToken(state) { return state.tokens[state.pos]; }

function expectPunct(state, value) {
    var tok = state.tokens[state.pos];
    if (!tok || tok.type !== 'punct' || tok.value !== value) throw new Error('Expected "' + value + '"');
    state.pos++;
}

function parseAddSub(state, allowArray) {
    var left = parseMulDiv(state, allowArray);
    var tok = peekToken(state);
    while (tok && tok.type === 'punct' && (tok.value === '+' || tok.value === '-')) {
        state.pos++;
        left = {type: 'binary', op: tok.value, left: left, right: parseMulDiv(state, false)};
        tok = peekToken(state);
    }
    return left;
}

function parseMulDiv(state, allowArray) {
    var left = parseUnary(state, allowArray);
    var tok = peekToken(state);
    while (tok && tok.type === 'punct' && (tok.value === '*' || tok.value === '/')) {
        state.pos++;
        left = {type: 'binary', op: tok.value, left: left, right: parseUnary(state, false)};
        tok = peekToken(state);
    }
    return left;
}

function parseUnary(state, allowArray) {
    var tok = peekToken(state);
    if (tok && tok.type === 'punct' && tok.value === '-') {
        state.pos++;
        return {type: 'negate', operand: parseUnary(state, false)};
    }
    return parsePrimary(state, allowArray);
}

function parsePrimary(state, allowArray) {
    var tok = peekToken(state);
    if (!tok) throw new Error('Unexpected end of expression');
    if (tok.type === 'number') { state.pos++; return {type: 'number', value: tok.value}; }
    if (tok.type === 'variable') { state.pos++; return {type: 'variable', name: tok.value}; }
    if (tok.type === 'function') {
        state.pos++;
        expectPunct(state, '(');
        var args = [];
        var next = peekToken(state);
        if (!(next && next.type === 'punct' && next.value === ')')) {
            args.push(parseAddSub(state, true));
            next = peekToken(state);
            while (next && next.type === 'punct' && next.value === ',') {
                state.pos++;
                args.push(parseAddSub(state, true));
                next = peekToken(state);
            }
        }
        expectPunct(state, ')');
        return {type: 'call', name: tok.value.toLowerCase(), args: args};
    }
    if (tok.type === 'punct' && tok.value === '(') {
        state.pos++;
        var inner = parseAddSub(state, false);
        expectPunct(state, ')');
        return inner;
    }
    if (tok.type === 'punct' && tok.value === '[' && allowArray) {
        state.pos++;
        var items = [];
        var t = peekToken(state);
        while (t && !(t.type === 'punct' && t.value === ']')) {
            if (t.type === 'variable') items.push(t.value);
            else if (!(t.type === 'punct' && t.value === ',')) throw new Error('Array literals may only hold column names');
            state.pos++;
            t = peekToken(state);
        }
        expectPunct(state, ']');
        return {type: 'array', items: items};
    }
    return {type: 'number', value: 0};
}

function evaluateExpression(ast, data) {
    var n = data.length;
    if (ast.type === 'number') return data.map(function() { return ast.value; });
    if (ast.type === 'variable') {
        return data.map(function(row) { return parseFloat(row[ast.name]) || 0; });
    }
    if (ast.type === 'negate') {
        return evaluateExpression(ast.operand, data).map(function(v) { return -v; });
    }
    if (ast.type === 'binary') {
        var left = evaluateExpression(ast.left, data);
        var right = evaluateExpression(ast.right, data);
        return left.map(function(l, i) {
            var r = right[i];
            if (ast.op === '+') return l + r;
            if (ast.op === '-') return l - r;
            if (ast.op === '*') return l * r;
            return r === 0 ? NaN : l / r;
        });
    }
    if (ast.type === 'call') return evaluateFunction(ast.name, ast.args, data);
    if (ast.type === 'array') throw new Error('Array literal outside function call');
    return new Array(n).fill(0);
}

function groupKeys(data, columns) {
    return data.map(function(row) {
        return columns.map(function(c) { return temporalValueToString(row[c], c); }).join('|');
    });
}

function applyGrouped(values, keys, fn) {
    var groups = {};
    keys.forEach(function(k, i) { (groups[k] = groups[k] || []).push(i); });
    var result = new Array(values.length).fill(NaN);
    Object.keys(groups).forEach(function(k) {
        var idx = groups[k];
        var transformed = fn(idx.map(function(i) { return values[i]; }));
        idx.forEach(function(i, j) { result[i] = transformed[j]; });
    });
    return result;
}

function computeGroupedZScore(values, data, groupColumns) {
    var zscore = function(vals) {
        var s = meanAndStd(vals);
        return vals.map(function(v) { return s.std === 0 ? 0 : (v - s.mean) / s.std; });
    };
    if (!groupColumns || groupColumns.length === 0) return zscore(values);
    return applyGrouped(values, groupKeys(data, groupColumns), zscore);
}

function computeGroupedQuantile(values, data, groupColumns) {
    if (!groupColumns || groupColumns.length === 0) return computeQuantileTransform(values);
    return applyGrouped(values, groupKeys(data, groupColumns), computeQuantileTransform);
}

function computePCA(a, b, component) {
    var n = a.length;
    if (n === 0) return [];
    var meanA = a.reduce(function(s, v) { return s + v; }, 0) / n;
    var meanB = b.reduce(function(s, v) { return s + v; }, 0) / n;
    var cov11 = 0, cov22 = 0, cov12 = 0;
    for (var i = 0; i < n; i++) {
        var da = a[i] - meanA, db = b[i] - meanB;
        cov11 += da * da; cov22 += db * db; cov12 += da * db;
    }
    cov11 /= n; cov22 /= n; cov12 /= n;
    var trace = cov11 + cov22;
    var det = cov11 * cov22 - cov12 * cov12;
    var disc = Math.sqrt(Math.max(0, trace * trace / 4 - det));
    var lambda1 = trace / 2 + disc;
    var v1 = Math.abs(cov12) > 1e-10 ? [lambda1 - cov22, cov12] : (cov11 >= cov22 ? [1, 0] : [0, 1]);
    var norm = Math.sqrt(v1[0] * v1[0] + v1[1] * v1[1]);
    v1 = [v1[0] / norm, v1[1] / norm];
    var vec = component === 1 ? v1 : [-v1[1], v1[0]];
    return a.map(function(av, i) { return (av - meanA) * vec[0] + (b[i] - meanB) * vec[1]; });
}

function computeOLSCoefficients(y, x) {
    var pts = [];
    for (var i = 0; i < y.length; i++) {
        if (isFinite(y[i]) && isFinite(x[i])) pts.push([x[i], y[i]]);
    }
    if (pts.length < 2) return null;
    var mx = 0, my = 0;
    pts.forEach(function(p) { mx += p[0]; my += p[1]; });
    mx /= pts.length; my /= pts.length;
    var sxy = 0, sxx = 0;
    pts.forEach(function(p) { sxy += (p[0] - mx) * (p[1] - my); sxx += (p[0] - mx) * (p[0] - mx); });
    if (sxx === 0) return null;
    var slope = sxy / sxx;
    return {intercept: my - slope * mx, slope: slope};
}

function computeOLSFitted(y, x) {
    var coef = computeOLSCoefficients(y, x);
    if (!coef) return y.map(function() { return NaN; });
    return x.map(function(v) { return coef.intercept + coef.slope * v; });
}

function computeOLSResidual(y, x) {
    var fitted = computeOLSFitted(y, x);
    return y.map(function(v, i) { return v - fitted[i]; });
}

function evaluateFunction(name, args, data) {
    var n = data.length;
    var arrayArg = function(k) {
        var a = args[k];
        return (a && a.type === 'array') ? a.items : [];
    };
    switch (name.toLowerCase()) {
        case 'z':
            return computeGroupedZScore(evaluateExpression(args[0], data), data, arrayArg(1));
        case 'q':
            return computeGroupedQuantile(evaluateExpression(args[0], data), data, arrayArg(1));
        case 'pca1':
        case 'pca2':
            return computePCA(evaluateExpression(args[0], data), evaluateExpression(args[1], data),
                              name.toLowerCase() === 'pca1' ? 1 : 2);
        case 'r':
            return computeOLSResidual(evaluateExpression(args[0], data), evaluateExpression(args[1], data));
        case 'f':
            return computeOLSFitted(evaluateExpression(args[0], data), evaluateExpression(args[1], data));
        case 'c':
            var vals = evaluateExpression(args[0], data);
            var lo = evaluateExpression(args[1], data);
            var hi = evaluateExpression(args[2], data);
            return vals.map(function(v, i) { return Math.min(hi[i], Math.max(lo[i], v)); });
        default:
            console.warn('Unknown function in expression: ' + name);
            return new Array(n).fill(0);
    }
}

function evaluateExpressionString(expr, data) {
    if (!expr || !String(expr).trim()) return data.map(function() { return 0; });
    try {
        return evaluateExpression(parseExpression(tokenizeExpression(String(expr))), data);
    } catch (err) {
        console.error('Error evaluating expression "' + expr + '":', err);
        return data.map(function() { return 0; });
    }
}

// ----------------------------------------------------------------- facets
function compareKeys(a, b) {
    var na = Number(a), nb = Number(b);
    if (a !== "" && b !== "" && isFinite(na) && isFinite(nb)) return na - nb;
    return String(a).localeCompare(String(b));
}

function distinctKeys(rows, col) {
    var seen = {};
    var keys = [];
    rows.forEach(function(row) {
        var v = row[col];
        if (v === null || v === undefined) return;
        var k = temporalValueToString(v, col);
        if (!seen[k]) { seen[k] = true; keys.push(k); }
    });
    return keys.sort(compareKeys);
}

function facetAxisIds(i) {
    var s = i === 0 ? "" : String(i + 1);
    return {x: "x" + s, y: "y" + s, xaxis: "xaxis" + s, yaxis: "yaxis" + s};
}

// Splits rows into facet panels: one column wraps, two columns form a grid.
function buildFacetPanels(data, facetCols, wrapFactor) {
    if (!facetCols || facetCols.length === 0) {
        return {mode: "single", nRows: 1, nCols: 1, panels: [{rows: data, label: null}]};
    }
    var matches = function(row, col, key) { return temporalValueToString(row[col], col) === key; };
    if (facetCols.length === 1) {
        var col = facetCols[0];
        var keys = distinctKeys(data, col);
        var nCols = Math.max(1, Math.ceil(Math.sqrt(keys.length * wrapFactor)));
        var nRows = Math.max(1, Math.ceil(keys.length / nCols));
        return {mode: "wrap", nRows: nRows, nCols: nCols, panels: keys.map(function(k) {
            return {rows: data.filter(function(r) { return matches(r, col, k); }), label: col + ": " + k};
        })};
    }
    var rowCol = facetCols[0], colCol = facetCols[1];
    var rowKeys = distinctKeys(data, rowCol), colKeys = distinctKeys(data, colCol);
    var panels = [];
    rowKeys.forEach(function(rk, r) {
        colKeys.forEach(function(ck, c) {
            panels.push({
                rows: data.filter(function(row) { return matches(row, rowCol, rk) && matches(row, colCol, ck); }),
                label: null,
                rowLabel: c === colKeys.length - 1 ? rowCol + ": " + rk : null,
                colLabel: r === 0 ? colCol + ": " + ck : null
            });
        });
    });
    return {mode: "grid", nRows: Math.max(1, rowKeys.length), nCols: Math.max(1, colKeys.length), panels: panels};
}

function applyFacetLayout(layout, facets) {
    if (facets.mode === "single") return layout;
    layout.grid = {rows: facets.nRows, columns: facets.nCols, pattern: "independent"};
    layout.annotations = layout.annotations || [];
    facets.panels.forEach(function(panel, i) {
        var ids = facetAxisIds(i);
        var ref = {xref: ids.x + " domain", yref: ids.y + " domain", showarrow: false, font: {size: 12}};
        if (panel.label) layout.annotations.push(Object.assign({x: 0.5, y: 1.08, xanchor: "center", text: panel.label}, ref));
        if (panel.colLabel) layout.annotations.push(Object.assign({x: 0.5, y: 1.08, xanchor: "center", text: "<b>" + panel.colLabel + "</b>"}, ref));
        if (panel.rowLabel) layout.annotations.push(Object.assign({x: 1.06, y: 0.5, textangle: 90, text: "<b>" + panel.rowLabel + "</b>"}, ref));
    });
    return layout;
}

// ------------------------------------------------------------------ layout
function aspectRatioHeight(chartId, fallbackRatio) {
    var slider = document.getElementById(chartId + "_aspect_ratio_slider");
    var ratio = slider ? Math.exp(parseFloat(slider.value)) : (fallbackRatio || 0.6);
    var el = document.getElementById(chartId);
    var width = el && el.offsetWidth ? el.offsetWidth : 800;
    return Math.max(200, width * ratio);
}

function setupAspectRatioControl(chartId, callback) {
    var slider = document.getElementById(chartId + '_aspect_ratio_slider');
    var label = document.getElementById(chartId + '_aspect_ratio_label');
    if (!slider) return;
    var apply = function() {
        var ratio = Math.exp(parseFloat(slider.value));
        if (label) label.textContent = ratio.toFixed(2);
        var el = document.getElementById(chartId);
        if (el && el.data) {
            Plotly.relayout(chartId, {height: el.offsetWidth * ratio});
        }
        if (callback) callback(ratio);
    };
    if (!slider._jsreportBound) {
        slider.addEventListener('input', apply);
        slider._jsreportBound = true;
    }
    apply();
}

function showChartError(chartId, err) {
    console.error('Error rendering ' + chartId + ':', err);
    var el = document.getElementById(chartId);
    if (el) el.innerHTML = '<p style="color: red;">Error loading data: ' + (err && err.message ? err.message : err) + '</p>';
}
"""

PIVOT_FILTER_BOX_FIX = r"""
(function() {
    if (window._pvtFilterBoxFixApplied) return;
    window._pvtFilterBoxFixApplied = true;
    var lastTriangle = null;
    document.addEventListener('click', function(e) {
        if (e.target && e.target.classList && e.target.classList.contains('pvtTriangle')) {
            lastTriangle = e.target;
        }
    }, true);
    var position = function(box) {
        if (!lastTriangle || !document.body.contains(box)) return;
        var rect = lastTriangle.getBoundingClientRect();
        var width = box.offsetWidth || 300;
        var height = box.offsetHeight || 300;
        var left = Math.min(rect.left, window.innerWidth - width - 10);
        var top = rect.bottom + 5;
        if (top + height > window.innerHeight - 10) top = Math.max(10, window.innerHeight - height - 10);
        box.style.position = 'fixed';
        box.style.left = Math.max(10, left) + 'px';
        box.style.top = top + 'px';
    };
    var watch = function(box) {
        [0, 10, 50, 100, 200].forEach(function(delay) {
            setTimeout(function() { position(box); }, delay);
        });
        var styleObserver = new MutationObserver(function() {
            if (box.style.position !== 'fixed') position(box);
        });
        styleObserver.observe(box, {attributes: true, attributeFilter: ['style']});
        var removalObserver = new MutationObserver(function() {
            if (!document.body.contains(box)) {
                styleObserver.disconnect();
                removalObserver.disconnect();
            }
        });
        removalObserver.observe(document.body, {childList: true, subtree: true});
    };
    new MutationObserver(function(mutations) {
        mutations.forEach(function(m) {
            m.addedNodes.forEach(function(node) {
                if (node.nodeType === 1 && node.classList.contains('pvtFilterBox')) watch(node);
            });
        });
    }).observe(document.body, {childList: true, subtree: true});
})();
"""
